from __future__ import annotations

from pathlib import Path

from ordenpdf.storage import artifact_path, output_filename, safe_folio


def test_folio_sanitization() -> None:
    assert safe_folio("OC-2025-001") == "OC_2025_001"
    assert safe_folio("OC/2025:001") == "OC_2025_001"
    assert safe_folio("../../etc") == "etc"
    assert safe_folio("") == "sin_folio"


def test_output_filename() -> None:
    name = output_filename("OC-2025-001", timestamp_ms=1736467200000)
    assert name == "Orden_Autorizacion_Compra_OC_2025_001_1736467200000.pdf"


def test_artifact_siblings() -> None:
    pdf = Path("/tmp/out/Orden_Autorizacion_Compra_A_1.pdf")
    assert artifact_path(pdf, "preview") == Path("/tmp/out/Orden_Autorizacion_Compra_A_1.png")
    assert artifact_path(pdf, "error").name == "Orden_Autorizacion_Compra_A_1.error.log"
