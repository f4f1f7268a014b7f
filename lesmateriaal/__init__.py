"""Lesmaterialen: bilingual (nl/de) course material catalog API."""
