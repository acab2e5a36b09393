"""Static gazetteer consulted before (and alongside) remote location search."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from tripmap.api.config import get_search_config
from tripmap.api.models import LocationCandidate


@dataclass(frozen=True)
class GazetteerEntry:
    code: str
    name: str
    city: str
    country: str
    address: str
    lat: float
    lng: float

    @property
    def id(self) -> str:
        return f"gazetteer-{self.code.lower()}"

    def matches(self, term_lower: str) -> bool:
        return (
            term_lower in self.code.lower()
            or term_lower in self.name.lower()
            or term_lower in self.city.lower()
        )

    def to_candidate(self) -> LocationCandidate:
        return LocationCandidate(
            id=self.id,
            name=self.name,
            address=self.address,
            latitude=self.lat,
            longitude=self.lng,
            source="gazetteer",
        )


GAZETTEER = (
    # Airports
    GazetteerEntry("BUD", "Budapest Ferenc Liszt International Airport", "Budapest", "Hungary",
                   "1185 Budapest, Hungary", 47.4394, 19.2618),
    GazetteerEntry("HAN", "Noi Bai International Airport", "Hanoi", "Vietnam",
                   "Phu Minh, Soc Son, Hanoi, Vietnam", 21.2212, 105.8072),
    GazetteerEntry("AMS", "Amsterdam Airport Schiphol", "Amsterdam", "Netherlands",
                   "Evert van de Beekstraat 202, 1118 CP Schiphol, Netherlands", 52.3105, 4.7683),
    GazetteerEntry("CDG", "Charles de Gaulle Airport", "Paris", "France",
                   "95700 Roissy-en-France, France", 49.0097, 2.5479),
    GazetteerEntry("LHR", "Heathrow Airport", "London", "United Kingdom",
                   "Longford TW6, United Kingdom", 51.4700, -0.4543),
    GazetteerEntry("VIE", "Vienna International Airport", "Vienna", "Austria",
                   "1300 Schwechat, Austria", 48.1103, 16.5697),
    GazetteerEntry("PRG", "Václav Havel Airport Prague", "Prague", "Czech Republic",
                   "Aviaticka, 161 08 Prague 6, Czech Republic", 50.1008, 14.2600),
    GazetteerEntry("FCO", "Leonardo da Vinci Airport", "Rome", "Italy",
                   "Via dell'Aeroporto di Fiumicino, 00054 Fiumicino, Italy", 41.8003, 12.2389),
    GazetteerEntry("MAD", "Adolfo Suárez Madrid-Barajas Airport", "Madrid", "Spain",
                   "Av de la Hispanidad, s/n, 28042 Madrid, Spain", 40.4983, -3.5676),
    GazetteerEntry("BER", "Berlin Brandenburg Airport", "Berlin", "Germany",
                   "Melli-Beese-Ring 1, 12529 Schönefeld, Germany", 52.3667, 13.5033),
    # Singapore landmarks
    GazetteerEntry("MBS", "Marina Bay Sands", "Singapore", "Singapore",
                   "10 Bayfront Ave, Singapore 018956", 1.2836, 103.8593),
    GazetteerEntry("MLP", "Merlion Park", "Singapore", "Singapore",
                   "Fullerton Rd, Singapore 049213", 1.2868, 103.8545),
    GazetteerEntry("GBTB", "Gardens by the Bay", "Singapore", "Singapore",
                   "18 Marina Gardens Dr, Singapore 018953", 1.2815683, 103.8636132),
)


def lookup(term: str) -> List[LocationCandidate]:
    """Case-insensitive substring match on code, name and city."""
    needle = term.strip().lower()
    if not needle:
        return []

    seen = set()
    matches = []
    for entry in GAZETTEER:
        if entry.id in seen or not entry.matches(needle):
            continue
        seen.add(entry.id)
        matches.append(entry.to_candidate())
    return matches


def _slug(term: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", term.lower()).strip("-") or "location"


def synthetic_candidate(term: str, config: Optional[dict] = None) -> LocationCandidate:
    """Fabricate a single candidate from the raw search term.

    Used when neither the gazetteer nor the remote provider produced
    anything, so the picker is never left completely empty.
    """
    cfg = config or get_search_config()
    cleaned = term.strip()
    return LocationCandidate(
        id=f"fallback-{_slug(cleaned)}",
        name=f"{cleaned} (Approximate Location)",
        address=cfg["fallback_address"],
        latitude=cfg["fallback_lat"],
        longitude=cfg["fallback_lng"],
        source="fallback",
    )
