"""Predefined bilingual taxonomy lists and the seeding job."""
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from lesmateriaal.db.crud.taxonomies import find_or_create_term
from lesmateriaal.models.import_run import ImportRun
from lesmateriaal.models.taxonomy import TAXONOMY_MODELS
from lesmateriaal.services.catalog_loader import invalidate_catalog_cache

logger = logging.getLogger(__name__)

PREDEFINED_TAXONOMIES: dict[str, tuple[str, ...]] = {
    "school-types": (
        "Basisschool / Grundschule",
        "Voortgezet onderwijs / Weiterführende Schule",
        "MBO / Berufsschule",
    ),
    "competences": (
        "Spreken / Sprechen",
        "Luisteren (en/of kijken) / Hören (und Sehen)",
        "Schrijven / Schreiben",
        "Lezen / Lesen",
        "Euregionale (interculturele) competenties / Euregionale (interkulturelle) Kompetenz",
        "Woordenschat / Wortschatz",
        "Medien- & tekstcompetentie / Medien- & Textkompetenz",
        "Uitspraak / Aussprache",
    ),
    "topics": (
        "Schoolsystemen / Schulsysteme",
        "Arbeidswereld & Studie / Arbeitswelt & Studium",
        "Mode / Mode",
        "Reclame / Werbung",
        "Wonen / Wohnen",
        "Hobby's / Hobbys",
        "Relaties (vrienden & familie) / Beziehungen (Freunde & Familie)",
        "Communicatie & Informatie / Öffentliche Kommunikation & Information",
        "Jeugdcultuur / Jugendkultur",
        "Duurzaamheid (klimaat) / Nachhaltigkeit (Klima)",
        "Natuur / Natur",
        "Politiek / Politik",
        "Democratie / Demokratie",
        "Burgerschap / (geen vertaling)",
        "Maatschappij / Gesellschaft",
        "Economie / Wirtschaft",
        "Kunst / Kunst",
        "Muziek / Musik",
        "Dagelijks leven / Alltag",
        "Feestdagen & tradities / Feiertage & Traditionen",
        "Diversiteit / Diversität",
        "Identiteit / Identität",
        "Sport / Sport",
        "Euregio / Euregio",
        "Geschiedenis / Geschichte",
        "Reizen / Reisen",
        "Duitsland / Deutschland",
        "Nederland / Niederlande",
        "België / Belgien",
        "Media /  Medien",
        "Taal / Sprache",
        "interculturele communicatie / Interkulturelle Kommunikation",
        "Film",
        "Eten / Essen",
    ),
    "material-types": (
        "Video / Video",
        "Podcast / Podcast",
        "Digitale leeromgeving / Digitale Lernumgebung",
        "Online werkvorm / Online Tool",
        "Groepsactiviteit / Gruppenaktivität",
        "Leesboek / Lesebuch",
        "Werkboek / Arbeitsheft",
        "Werkblad / Arbeitsblatt",
        "Leskist (analoog) / Unterrichtskiste (analog)",
        "Spelletje / Spiel",
        "Liedje / Lied",
        "Leestekst / Lesetext",
        "Lesplan / Unterrichtsplan",
        "Tekst / Text",
    ),
}

# find_or_create_term outcome -> reported status
_STATUS = {"created": "created", "updated": "updated", "existing": "skipped"}


def seed_taxonomies(
    db: Session,
    taxonomies: dict[str, tuple[str, ...]] = PREDEFINED_TAXONOMIES,
) -> dict[str, Any]:
    """
    Create missing terms and fill missing German titles. Idempotent.

    Each term commits on its own; a failing term is reported and the rest
    continue.
    """
    started_at = datetime.now(timezone.utc)
    totals = {"created": 0, "updated": 0, "skipped": 0, "errors": 0}
    results: dict[str, list[dict[str, Any]]] = {}

    for collection, titles in taxonomies.items():
        model = TAXONOMY_MODELS[collection]
        results[collection] = []
        for title in titles:
            try:
                term, outcome = find_or_create_term(db, model, title)
                db.commit()
            except Exception as e:
                db.rollback()
                logger.exception("[Taxonomies] %s %r failed", collection, title)
                totals["errors"] += 1
                results[collection].append({"title": title, "status": "error", "error": str(e)})
                continue
            if term is None:
                continue
            status = _STATUS[outcome]
            totals[status] += 1
            results[collection].append({"title": title, "status": status, "id": term.id})

    invalidate_catalog_cache()
    logger.info(
        "[Taxonomies] created=%d updated=%d skipped=%d errors=%d",
        totals["created"], totals["updated"], totals["skipped"], totals["errors"],
    )

    try:
        db.add(ImportRun(
            source="TAXONOMIES",
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            created_count=totals["created"],
            duplicate_count=totals["skipped"],
            error_count=totals["errors"],
        ))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.warning("Failed to save import_run: %s", e)

    return {
        "message": "Taxonomies added successfully",
        "summary": {
            "total_created": totals["created"],
            "total_updated": totals["updated"],
            "total_skipped": totals["skipped"],
            "total_errors": totals["errors"],
            "total_processed": totals["created"] + totals["updated"] + totals["skipped"],
        },
        "results": results,
    }
