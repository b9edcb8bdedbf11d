"""Hand-verified positional mapping profiles for known exporters."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from ..sheets.models import RawSheet
from .auto_mapper import apply_positional_mapping
from .models import FieldDefinition, MappingResult, ProfileRegistrationError

logger = logging.getLogger(__name__)

# Sheet metadata keys used for profile lookup
SYSTEM_KEY = "system"
DOCUMENT_TYPE_KEY = "document_type"
SUBTYPE_KEY = "subtype"


class SystemProfile(BaseModel):
    """Exact column mapping for one exporter/document combination."""

    id: str
    name: str
    system: str
    document_type: str
    subtype: str
    column_map: dict[int, str] = Field(default_factory=dict)  # Column position -> field name

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.system, self.document_type, self.subtype)


# NAMOS - JPK_VDEK SprzedazWiersz, 64 data columns after the meta block.
# Col 8 is reserved; K_10/K_11 verified at cols 45/46 against 23% VAT math.
NAMOS_VDEK_SPRZEDAZ_MAP: dict[int, str] = {
    0: "LpSprzedazy",
    1: "KodKontrahenta",
    2: "NrKontrahenta",
    3: "NazwaKontrahenta",
    4: "DowodSprzedazy",
    5: "DataWystawienia",
    6: "DataSprzedazy",
    7: "TypDokumentu",
    **{9 + i: f"GTU_{i + 1:02d}" for i in range(13)},
    22: "SW",
    23: "EE",
    24: "TP",
    25: "TT_WNT",
    26: "TT_D",
    27: "MR_T",
    28: "MR_UZ",
    29: "I_42",
    30: "I_63",
    31: "B_SPV",
    32: "B_SPV_DOSTAWA",
    33: "B_MPV_PROWIZJA",
    34: "MPP",
    35: "IED",
    **{45 + i: f"K_{10 + i}" for i in range(19)},
}

# NAMOS - JPK_FA Faktura, 56 data columns after the meta block.
# P_15 verified at col 27 (net + VAT = gross).
NAMOS_FA_FAKTURA_MAP: dict[int, str] = {
    0: "KodWaluty",
    1: "P_1",
    2: "P_2",
    3: "P_3A",
    4: "P_3B",
    5: "P_3C",
    6: "P_3D",
    7: "P_4A",
    8: "P_5",
    9: "P_4B",
    10: "P_6",
    11: "DataSprzedazy",
    12: "P_13_1",
    13: "P_14_1",
    14: "P_13_2",
    15: "P_14_2",
    16: "P_13_3",
    17: "P_14_3",
    18: "P_13_4",
    19: "P_13_5",
    20: "P_13_6",
    21: "P_14_4",
    22: "P_14_5",
    23: "P_13_7",
    24: "P_14_6",
    25: "P_13_8",
    26: "P_13_9",
    27: "P_15",
    51: "RodzajFaktury",
}

# ESO - JPK_MAG WZ, 15 data columns: document fields (0-5), line fields (8-14).
# Col 8 repeats the document number and is left to col 1.
ESO_MAG_WZ_MAP: dict[int, str] = {
    0: "MagazynNadawcy",
    1: "NumerDokumentu",
    2: "DataDokumentu",
    3: "WartoscDokumentu",
    4: "DataOperacji",
    5: "MagazynOdbiorcy",
    8: "NumerDokumentu",
    9: "KodTowaru",
    10: "NazwaTowaru",
    11: "IloscWydana",
    12: "JednostkaMiary",
    13: "CenaJednostkowa",
    14: "WartoscPozycji",
}


class ProfileRegistry:
    """Registry of system profiles, looked up by exact metadata equality."""

    def __init__(self):
        self._profiles: dict[tuple[str, str, str], SystemProfile] = {}

    def register(self, profile: SystemProfile):
        """Register a profile; one profile per (system, document type, subtype)."""
        if profile.key in self._profiles:
            raise ProfileRegistrationError(
                f"Profile already registered for {'/'.join(profile.key)}: "
                f"{self._profiles[profile.key].id}"
            )
        self._profiles[profile.key] = profile

    def find(self, system: str, document_type: str, subtype: str) -> Optional[SystemProfile]:
        """Find the profile for an exact (system, document type, subtype)."""
        return self._profiles.get((system, document_type, subtype))

    def list_profiles(self) -> list[SystemProfile]:
        return list(self._profiles.values())

    def match(self, sheet: RawSheet) -> Optional[SystemProfile]:
        """Find the profile named by a sheet's metadata, if it names one."""
        system = sheet.metadata.get(SYSTEM_KEY)
        document_type = sheet.metadata.get(DOCUMENT_TYPE_KEY)
        subtype = sheet.metadata.get(SUBTYPE_KEY)

        if not system or not document_type or not subtype:
            return None
        return self.find(system, document_type, subtype)

    def apply(
        self, sheet: RawSheet, fields: list[FieldDefinition]
    ) -> Optional[tuple[SystemProfile, MappingResult]]:
        """
        Apply the profile matching a sheet's metadata.

        Returns:
            The profile and its positional mapping, or None when no profile matches
        """
        profile = self.match(sheet)
        if profile is None:
            return None

        logger.info(f"Applying profile {profile.id} to sheet '{sheet.name}'")
        result = apply_positional_mapping(sheet.column_count, profile.column_map, fields)
        return profile, result


def default_profiles() -> ProfileRegistry:
    """Build the registry of bundled profiles."""
    registry = ProfileRegistry()
    registry.register(
        SystemProfile(
            id="NAMOS_JPK_VDEK_SprzedazWiersz",
            name="NAMOS -> JPK_V7M Sprzedaż",
            system="NAMOS",
            document_type="JPK_VDEK",
            subtype="SprzedazWiersz",
            column_map=NAMOS_VDEK_SPRZEDAZ_MAP,
        )
    )
    registry.register(
        SystemProfile(
            id="NAMOS_JPK_FA_Faktura",
            name="NAMOS -> JPK_FA Faktura",
            system="NAMOS",
            document_type="JPK_FA",
            subtype="Faktura",
            column_map=NAMOS_FA_FAKTURA_MAP,
        )
    )
    registry.register(
        SystemProfile(
            id="ESO_JPK_MAG_WZ",
            name="ESO -> JPK_MAG WZ",
            system="ESO",
            document_type="JPK_MAG",
            subtype="WZ",
            column_map=ESO_MAG_WZ_MAP,
        )
    )
    return registry
