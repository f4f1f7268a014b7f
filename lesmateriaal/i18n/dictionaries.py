"""UI labels per locale (nl default, de)."""
from typing import Optional

Dictionary = dict[str, str]

DICTIONARIES: dict[str, Dictionary] = {
    "nl": {
        "siteTitle": "Lesmaterialen",
        "siteTagline": "Lesmateriaal voor het Duits- en Nederlands onderwijs in de Euregio",
        "searchTitle": "Wat zoek je?",
        "searchPlaceholder": "Zoeken op titel",
        "materialTypesTitle": "Materiaalsoorten",
        "schoolTypesTitle": "Schooltypes",
        "competencesTitle": "Competenties",
        "topicsTitle": "Onderwerpen",
        "cefrTitle": "ERK-niveaus",
        "cefrLabel": "ERK-niveau:",
        "loadMore": "Toon meer",
        "languagesTitle": "Taal van de inhoud",
        "languageDutch": "Nederlands",
        "languageGerman": "Duits",
        "showFilters": "Filters tonen",
        "hideFilters": "Filters verbergen",
        "detailBackToOverview": "Terug naar overzicht",
        "detailOpenWebsite": "Open website",
        "detailDownload": "Download",
        "detailExternalLinksTitle": "Externe links",
        "navigationPrevious": "Vorige",
        "navigationNext": "Volgende",
        "navigationPosition": "{position} van {total}",
        "materialFound": "1 lesmateriaal gevonden",
        "materialsFound": "{count} lesmaterialen gevonden",
        "contactLabel": "Contactgegevens",
        "licenseLabel": "Licentie",
        "untitled": "Zonder titel",
    },
    "de": {
        "siteTitle": "Unterrichtsmaterialien",
        "siteTagline": "Materialien für den Deutsch- und Niederländischunterricht in der Euregio",
        "searchTitle": "Wonach suchst du?",
        "searchPlaceholder": "Nach Titel suchen",
        "materialTypesTitle": "Materialarten",
        "schoolTypesTitle": "Schularten",
        "competencesTitle": "Kompetenzen",
        "topicsTitle": "Themen",
        "cefrTitle": "GER-Niveaus",
        "cefrLabel": "GER-Niveau:",
        "loadMore": "Mehr anzeigen",
        "languagesTitle": "Sprache",
        "languageDutch": "Niederländisch",
        "languageGerman": "Deutsch",
        "showFilters": "Filter anzeigen",
        "hideFilters": "Filter ausblenden",
        "detailBackToOverview": "Zurück zur Übersicht",
        "detailOpenWebsite": "Webseite öffnen",
        "detailDownload": "Herunterladen",
        "detailExternalLinksTitle": "Externe Links",
        "navigationPrevious": "Zurück",
        "navigationNext": "Weiter",
        "navigationPosition": "{position} von {total}",
        "materialFound": "1 Material gefunden",
        "materialsFound": "{count} Materialen gefunden",
        "contactLabel": "Kontaktdaten",
        "licenseLabel": "Lizenz",
        "untitled": "Ohne Titel",
    },
}


def get_dictionary(locale: Optional[str]) -> Dictionary:
    """Labels for `locale`; anything but 'de' gets Dutch."""
    if locale == "de":
        return DICTIONARIES["de"]
    return DICTIONARIES["nl"]


def materials_found(locale: Optional[str], count: int) -> str:
    d = get_dictionary(locale)
    if count == 1:
        return d["materialFound"]
    return d["materialsFound"].format(count=count)


def navigation_position(locale: Optional[str], position: int, total: int) -> str:
    return get_dictionary(locale)["navigationPosition"].format(position=position, total=total)
