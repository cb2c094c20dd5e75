"""KML 2.2 import/export for campaign areas.

Export writes one ``Placemark`` per area with its name, description, a
``campaignId`` ExtendedData entry and the outer ring as ``lng,lat,0`` tuples.

Import walks every ``Placemark`` that carries a ``Polygon`` and turns its outer
ring into an :class:`~greencrowd.domain.models.AreaDraft` with ``(lat, lng)``
vertices. Placemarks without a usable ring are skipped with a warning so one bad
feature does not reject a whole file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from lxml import etree

from greencrowd.core.exceptions import KmlError
from greencrowd.domain.models import Area, AreaDraft

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"
KML_MEDIA_TYPE = "application/vnd.google-earth.kml+xml"

MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0
MIN_AREA_VERTICES = 3


@dataclass
class KmlImportResult:
    areas: list[AreaDraft] = field(default_factory=list)
    skipped: int = 0


def _kml(tag: str) -> str:
    return f"{{{KML_NAMESPACE}}}{tag}"


def format_coordinates(polygon: Iterable[tuple[float, float]]) -> str:
    """Format `(lat, lng)` vertices as KML `lng,lat,0` tuples."""
    return " ".join(f"{lng!r},{lat!r},0" for lat, lng in polygon)


def export_areas_kml(areas: Iterable[Area], *, document_name: str = "") -> bytes:
    """Serialise areas into a KML document (UTF-8 bytes with XML declaration)."""
    root = etree.Element(_kml("kml"), nsmap={None: KML_NAMESPACE})
    document = etree.SubElement(root, _kml("Document"))
    if document_name:
        etree.SubElement(document, _kml("name")).text = document_name

    for area in areas:
        placemark = etree.SubElement(document, _kml("Placemark"), id=area.id)
        etree.SubElement(placemark, _kml("name")).text = area.name
        etree.SubElement(placemark, _kml("description")).text = area.description or ""

        extended = etree.SubElement(placemark, _kml("ExtendedData"))
        data = etree.SubElement(extended, _kml("Data"), name="campaignId")
        etree.SubElement(data, _kml("value")).text = area.campaign_id or ""

        polygon = etree.SubElement(placemark, _kml("Polygon"))
        outer = etree.SubElement(polygon, _kml("outerBoundaryIs"))
        ring = etree.SubElement(outer, _kml("LinearRing"))
        etree.SubElement(ring, _kml("coordinates")).text = format_coordinates(area.polygon or [])

    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)


def parse_coordinates_text(text: str) -> list[tuple[float, float]]:
    """Parse KML coordinate text (`lng,lat[,alt]` tuples) into `(lat, lng)` pairs.

    Raises:
        ValueError: If a tuple is malformed or out of WGS 84 range.
    """
    polygon: list[tuple[float, float]] = []
    for token in text.split():
        parts = token.split(",")
        if len(parts) < 2:
            raise ValueError(f"malformed coordinate tuple {token!r}")
        lng, lat = float(parts[0]), float(parts[1])
        if not (MIN_LATITUDE <= lat <= MAX_LATITUDE and MIN_LONGITUDE <= lng <= MAX_LONGITUDE):
            raise ValueError(f"coordinate out of range (lat={lat}, lng={lng})")
        polygon.append((lat, lng))
    return polygon


def _text(elem: _Element | None) -> str:
    if elem is None or elem.text is None:
        return ""
    return elem.text.strip()


def _extended_data(placemark: _Element) -> dict[str, str]:
    out: dict[str, str] = {}
    for data in placemark.iterfind(".//{*}ExtendedData/{*}Data"):
        key = data.get("name")
        if key:
            out[key] = _text(data.find("{*}value"))
    return out


def import_areas_kml(content: bytes, *, campaign_id: str | None = None) -> KmlImportResult:
    """Decode area drafts from a KML document.

    `campaign_id` is used for placemarks without a `campaignId` ExtendedData entry.

    Raises:
        KmlError: If the document is not well-formed XML.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise KmlError(f"KML is not well-formed XML: {exc}") from exc

    result = KmlImportResult()
    for idx, placemark in enumerate(root.iter("{*}Placemark")):
        name = _text(placemark.find("{*}name")) or f"Area {idx + 1}"
        coords = placemark.find(".//{*}Polygon/{*}outerBoundaryIs/{*}LinearRing/{*}coordinates")
        if coords is None:
            logger.warning("Skipping placemark '%s': no polygon outer ring", name)
            result.skipped += 1
            continue

        try:
            polygon = parse_coordinates_text(_text(coords))
        except ValueError as exc:
            logger.warning("Skipping placemark '%s': %s", name, exc)
            result.skipped += 1
            continue

        if len(polygon) < MIN_AREA_VERTICES:
            logger.warning("Skipping placemark '%s': %d vertices, need %d", name, len(polygon), MIN_AREA_VERTICES)
            result.skipped += 1
            continue

        extended = _extended_data(placemark)
        result.areas.append(
            AreaDraft(
                name=name,
                description=_text(placemark.find("{*}description")),
                campaign_id=extended.get("campaignId") or campaign_id,
                polygon=polygon,
            )
        )

    logger.info("Imported %d area(s) from KML, skipped %d", len(result.areas), result.skipped)
    return result
