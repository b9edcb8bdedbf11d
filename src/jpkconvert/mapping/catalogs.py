"""Field catalogs for the supported JPK document subtypes."""

import logging
from typing import Optional

from .models import CatalogNotFoundError, FieldDefinition, FieldType

logger = logging.getLogger(__name__)

S, D, DEC, INT, NIP, B, C = (
    FieldType.STRING,
    FieldType.DATE,
    FieldType.DECIMAL,
    FieldType.INTEGER,
    FieldType.NIP,
    FieldType.BOOLEAN,
    FieldType.COUNTRY,
)

GTU_DESCRIPTIONS = [
    "Dostawa napojów alkoholowych",
    "Dostawa paliw",
    "Dostawa oleju opałowego",
    "Dostawa wyrobów tytoniowych",
    "Dostawa odpadów",
    "Dostawa urządzeń elektronicznych",
    "Dostawa pojazdów",
    "Dostawa metali szlachetnych",
    "Dostawa produktów leczniczych",
    "Dostawa budynków",
    "Usługi w zakresie przenoszenia GHG",
    "Usługi o charakterze niematerialnym",
    "Usługi transportowe i gospodarki magazynowej",
]

PROCEDURE_MARKERS = [
    ("SW", "Sprzedaż wysyłkowa z terytorium kraju"),
    ("EE", "Usługi telekomunikacyjne, elektroniczne"),
    ("TP", "Transakcja z podmiotem powiązanym"),
    ("TT_WNT", "Transakcja trójstronna - WNT"),
    ("TT_D", "Transakcja trójstronna - dostawa"),
    ("MR_T", "Marża - usługi turystyki"),
    ("MR_UZ", "Marża - towary używane"),
    ("I_42", "Import art. 42"),
    ("I_63", "Import art. 63"),
    ("B_SPV", "Transfer bonu jednego przeznaczenia"),
    ("B_SPV_DOSTAWA", "Dostawa objęta bonem"),
    ("B_MPV_PROWIZJA", "Prowizja od bonu różnego przeznaczenia"),
    ("MPP", "Mechanizm podzielonej płatności"),
    ("IED", "Import e-commerce"),
]


# JPK_V7M(3) / JPK_VDEK - SprzedazWiersz
V7M_SPRZEDAZ_FIELDS: list[FieldDefinition] = [
    FieldDefinition(name="LpSprzedazy", label="Lp.", type=INT, required=True,
                    description="Numer kolejny wiersza",
                    synonyms=("lp", "nr", "numer", "wiersz", "pozycja")),
    FieldDefinition(name="KodKontrahenta", label="Kod kraju", type=C,
                    description="Kod kraju kontrahenta",
                    synonyms=("kod_kraju", "kraj", "country")),
    FieldDefinition(name="NrKontrahenta", label="NIP kontrahenta", type=NIP,
                    synonyms=("nip", "nip_kontrahenta", "nip_nabywcy", "nr_kontrahenta", "tax_id")),
    FieldDefinition(name="NazwaKontrahenta", label="Nazwa kontrahenta", type=S,
                    synonyms=("nazwa", "kontrahent", "nabywca", "firma", "nazwa_kontrahenta", "nazwa_nabywcy")),
    FieldDefinition(name="DowodSprzedazy", label="Nr dokumentu", type=S, required=True,
                    description="Numer faktury / dokumentu sprzedaży",
                    synonyms=("nr_faktury", "numer_faktury", "dowod", "dokument", "faktura", "invoice")),
    FieldDefinition(name="DataWystawienia", label="Data wystawienia", type=D, required=True,
                    synonyms=("data_wystawienia", "data_wystawienia_faktury", "issue_date")),
    FieldDefinition(name="DataSprzedazy", label="Data sprzedaży", type=D,
                    synonyms=("data_sprzedazy", "sale_date")),
    FieldDefinition(name="TypDokumentu", label="Typ dokumentu", type=S,
                    description="RO, WEW, FP",
                    synonyms=("typ", "typ_dokumentu", "doc_type")),
    *[
        FieldDefinition(name=f"GTU_{i:02d}", label=f"GTU {i:02d}", type=B, description=desc)
        for i, desc in enumerate(GTU_DESCRIPTIONS, start=1)
    ],
    *[
        FieldDefinition(name=name, label=name, type=B, description=desc)
        for name, desc in PROCEDURE_MARKERS
    ],
    FieldDefinition(name="K_10", label="Netto 23%", type=DEC, synonyms=("netto_23", "netto23", "podstawa_23")),
    FieldDefinition(name="K_11", label="VAT 23%", type=DEC, synonyms=("vat_23", "vat23", "podatek_23")),
    FieldDefinition(name="K_12", label="Netto 8%", type=DEC, synonyms=("netto_8", "netto8", "podstawa_8")),
    FieldDefinition(name="K_13", label="VAT 8%", type=DEC, synonyms=("vat_8", "vat8", "podatek_8")),
    FieldDefinition(name="K_14", label="Netto 5%", type=DEC, synonyms=("netto_5", "netto5", "podstawa_5")),
    FieldDefinition(name="K_15", label="VAT 5%", type=DEC, synonyms=("vat_5", "vat5", "podatek_5")),
    FieldDefinition(name="K_16", label="Netto 0%", type=DEC, synonyms=("netto_0", "netto0", "podstawa_0")),
    FieldDefinition(name="K_17", label="Zwolnione", type=DEC, synonyms=("zwolnione", "zw")),
    FieldDefinition(name="K_18", label="WDT/Eksport", type=DEC, synonyms=("wdt", "eksport")),
    FieldDefinition(name="K_19", label="Eksport usług", type=DEC, synonyms=("eksport_uslug",)),
    FieldDefinition(name="K_20", label="WNT", type=DEC),
    FieldDefinition(name="K_21", label="Import art.33a", type=DEC),
    FieldDefinition(name="K_22", label="Import usług", type=DEC),
    FieldDefinition(name="K_23", label="WNT netto", type=DEC),
    FieldDefinition(name="K_24", label="WNT VAT", type=DEC),
    FieldDefinition(name="K_25", label="Import tow. netto", type=DEC),
    FieldDefinition(name="K_26", label="Import tow. VAT", type=DEC),
    FieldDefinition(name="K_27", label="Import usł. netto", type=DEC),
    FieldDefinition(name="K_28", label="Import usł. VAT", type=DEC),
    FieldDefinition(name="NumerKSeF", label="Numer KSeF", type=S, synonyms=("ksef", "nr_ksef", "numer_ksef")),
    FieldDefinition(name="OznaczenieKSeF", label="Oznaczenie KSeF", type=S,
                    description="OFF/BFK/DI", synonyms=("oznaczenie_ksef",)),
]

# JPK_FA(4) - Faktura
FA_FAKTURA_FIELDS: list[FieldDefinition] = [
    FieldDefinition(name="KodWaluty", label="Waluta", type=S, required=True,
                    synonyms=("waluta", "currency", "kod_waluty")),
    FieldDefinition(name="P_1", label="Data wystawienia", type=D, required=True,
                    synonyms=("data_wystawienia", "data_faktury", "issue_date")),
    FieldDefinition(name="P_2", label="Nr faktury", type=S, required=True,
                    synonyms=("nr_faktury", "numer_faktury", "numer", "invoice_number")),
    FieldDefinition(name="P_3A", label="Nabywca - nazwa", type=S, required=True,
                    synonyms=("nabywca", "nazwa_nabywcy", "buyer_name")),
    FieldDefinition(name="P_3B", label="Nabywca - adres", type=S, required=True,
                    synonyms=("adres_nabywcy", "buyer_address")),
    FieldDefinition(name="P_3C", label="Sprzedawca - nazwa", type=S, required=True,
                    synonyms=("sprzedawca", "nazwa_sprzedawcy", "seller_name")),
    FieldDefinition(name="P_3D", label="Sprzedawca - adres", type=S,
                    synonyms=("adres_sprzedawcy", "seller_address")),
    FieldDefinition(name="P_4A", label="Sprzedawca - kraj", type=C, synonyms=("kraj_sprzedawcy",)),
    FieldDefinition(name="P_5", label="NIP sprzedawcy", type=NIP, required=True,
                    synonyms=("nip_sprzedawcy", "seller_nip", "seller_tax_id")),
    FieldDefinition(name="P_4B", label="Nabywca - kraj", type=C, synonyms=("kraj_nabywcy",)),
    FieldDefinition(name="P_6", label="NIP nabywcy", type=NIP,
                    synonyms=("nip_nabywcy", "buyer_nip", "buyer_tax_id")),
    FieldDefinition(name="DataSprzedazy", label="Data sprzedaży", type=D,
                    synonyms=("data_sprzedazy", "sale_date")),
    FieldDefinition(name="P_13_1", label="Netto 23%", type=DEC, synonyms=("netto_23", "netto23")),
    FieldDefinition(name="P_14_1", label="VAT 23%", type=DEC, synonyms=("vat_23", "vat23")),
    FieldDefinition(name="P_13_2", label="Netto 8%", type=DEC, synonyms=("netto_8",)),
    FieldDefinition(name="P_14_2", label="VAT 8%", type=DEC, synonyms=("vat_8",)),
    FieldDefinition(name="P_13_3", label="Netto 5%", type=DEC, synonyms=("netto_5",)),
    FieldDefinition(name="P_14_3", label="VAT 5%", type=DEC, synonyms=("vat_5",)),
    FieldDefinition(name="P_13_4", label="Netto 0%", type=DEC, synonyms=("netto_0",)),
    FieldDefinition(name="P_13_5", label="Netto zw.", type=DEC, synonyms=("zwolnione",)),
    FieldDefinition(name="P_13_6", label="Netto np.", type=DEC),
    FieldDefinition(name="P_14_4", label="VAT w.", type=DEC),
    FieldDefinition(name="P_14_5", label="VAT np.", type=DEC),
    FieldDefinition(name="P_13_7", label="Netto odw.", type=DEC),
    FieldDefinition(name="P_14_6", label="VAT odw.", type=DEC),
    FieldDefinition(name="P_13_8", label="Netto eksport", type=DEC),
    FieldDefinition(name="P_13_9", label="Netto WDT", type=DEC),
    FieldDefinition(name="P_13_10", label="Netto import", type=DEC),
    FieldDefinition(name="P_13_11", label="Netto import usł.", type=DEC),
    FieldDefinition(name="P_15", label="Brutto razem", type=DEC, required=True,
                    description="Kwota należności ogółem",
                    synonyms=("brutto", "razem", "total", "kwota_brutto")),
    FieldDefinition(name="RodzajFaktury", label="Rodzaj faktury", type=S, required=True,
                    description="VAT, KOR, ZAL, POZ",
                    synonyms=("rodzaj", "typ_faktury", "invoice_type")),
]

# JPK_MAG(1) - WZ, document-level fields repeated on every line
MAG_WZ_DOC_FIELDS: list[FieldDefinition] = [
    FieldDefinition(name="MagazynNadawcy", label="Magazyn nadawcy", type=S, required=True,
                    synonyms=("magazyn", "warehouse")),
    FieldDefinition(name="NumerDokumentu", label="Nr dokumentu", type=S, required=True,
                    synonyms=("nr_dokumentu", "numer_wz", "doc_number")),
    FieldDefinition(name="DataDokumentu", label="Data dokumentu", type=D, required=True,
                    synonyms=("data", "data_dokumentu")),
    FieldDefinition(name="WartoscDokumentu", label="Wartość dokumentu", type=DEC, required=True,
                    synonyms=("wartosc_dokumentu",)),
    FieldDefinition(name="DataOperacji", label="Data operacji", type=D, synonyms=("data_operacji",)),
    FieldDefinition(name="MagazynOdbiorcy", label="Magazyn odbiorcy", type=S, synonyms=("magazyn_odbiorcy",)),
]

# JPK_MAG(1) - WZ line items
MAG_WZ_LINE_FIELDS: list[FieldDefinition] = [
    FieldDefinition(name="NumerWiersza", label="Lp.", type=INT, required=True,
                    synonyms=("lp", "nr", "wiersz")),
    FieldDefinition(name="KodTowaru", label="Kod towaru", type=S, required=True,
                    synonyms=("kod", "indeks", "sku", "product_code")),
    FieldDefinition(name="NazwaTowaru", label="Nazwa towaru", type=S, required=True,
                    synonyms=("nazwa", "towar", "produkt", "product_name")),
    FieldDefinition(name="IloscWydana", label="Ilość", type=DEC, required=True,
                    synonyms=("ilosc", "qty", "quantity")),
    FieldDefinition(name="JednostkaMiary", label="Jm.", type=S, required=True,
                    synonyms=("jm", "jednostka", "unit")),
    FieldDefinition(name="CenaJednostkowa", label="Cena jedn.", type=DEC, required=True,
                    synonyms=("cena", "cena_jednostkowa", "price")),
    FieldDefinition(name="WartoscPozycji", label="Wartość", type=DEC, required=True,
                    synonyms=("wartosc", "value", "amount")),
]


class CatalogRegistry:
    """Field catalogs keyed by (document type, subtype)."""

    def __init__(self):
        self._catalogs: dict[tuple[str, str], list[FieldDefinition]] = {}
        self._labels: dict[tuple[str, str], str] = {}

    def register(
        self, document_type: str, subtype: str, fields: list[FieldDefinition], label: str = ""
    ):
        """Register a catalog; field names must be unique within it."""
        names = [f.name for f in fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field names in {document_type}.{subtype}: {duplicates}")
        self._catalogs[(document_type, subtype)] = list(fields)
        self._labels[(document_type, subtype)] = label or subtype

    def get(self, document_type: str, subtype: str) -> Optional[list[FieldDefinition]]:
        """Get a catalog, or None if not registered."""
        fields = self._catalogs.get((document_type, subtype))
        return list(fields) if fields is not None else None

    def require(self, document_type: str, subtype: str) -> list[FieldDefinition]:
        """Get a catalog, raising CatalogNotFoundError if not registered."""
        fields = self.get(document_type, subtype)
        if fields is None:
            raise CatalogNotFoundError(f"No field catalog for {document_type}.{subtype}")
        return fields

    def label(self, document_type: str, subtype: str) -> Optional[str]:
        return self._labels.get((document_type, subtype))

    def keys(self) -> list[tuple[str, str]]:
        """List registered (document type, subtype) pairs."""
        return list(self._catalogs)


def field_types(fields: list[FieldDefinition]) -> dict[str, FieldType]:
    """Build a field name -> type table for one catalog."""
    return {f.name: f.type for f in fields}


def default_catalogs() -> CatalogRegistry:
    """Build the registry of bundled catalogs."""
    registry = CatalogRegistry()
    registry.register("JPK_VDEK", "SprzedazWiersz", V7M_SPRZEDAZ_FIELDS, "Sprzedaż - wiersze")
    registry.register("JPK_FA", "Faktura", FA_FAKTURA_FIELDS, "Faktury - nagłówki")
    registry.register(
        "JPK_MAG", "WZ", MAG_WZ_DOC_FIELDS + MAG_WZ_LINE_FIELDS, "Magazyn - wydania zewnętrzne"
    )
    logger.debug(f"Registered {len(registry.keys())} field catalogs")
    return registry
