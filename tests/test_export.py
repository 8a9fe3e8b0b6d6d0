from openpyxl import load_workbook

from estatecache.export import COMPARE_HEADERS, export_compare_to_xlsx, price_per_square_meter
from estatecache.models import Listing


def test_export_compare_to_xlsx(tmp_path):
    listings = [
        Listing(reference="A", title="Appartement T2", city="Lille", zip_code="59000",
                contract_type="achat", price=150000, square_meter=50, number_of_beds=2),
        Listing(reference="B", label_type="Studio", city="Paris", zip_code="75015",
                contract_type="location", price=900, square_meter=0),
    ]

    export_path = export_compare_to_xlsx(listings, tmp_path / "out" / "compare.xlsx")

    assert export_path.exists()
    worksheet = load_workbook(export_path).active
    rows = [[cell.value for cell in row] for row in worksheet.iter_rows()]
    assert rows[0] == COMPARE_HEADERS
    assert rows[1][:3] == ["A", "Appartement T2", "Lille"]
    assert rows[1][7] == 3000
    assert rows[2][1] == "Studio"
    assert rows[2][7] is None


def test_price_per_square_meter_rounds():
    assert price_per_square_meter(Listing(reference="A", price=1000, square_meter=3)) == 333.33
