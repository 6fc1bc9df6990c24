"""Tests for result export: dict, CSV and text report."""

import csv
import io
import json

import pytest

from impotsim.sdk import (
    DeclarantInputs,
    TaxInputs,
    compute_tax,
    format_result_text,
    result_to_csv_string,
    result_to_dict,
    write_result_csv,
)
from impotsim.sdk.taxes import load_tax_rules


@pytest.fixture
def single_result():
    inputs = TaxInputs(declarant1=DeclarantInputs(gross_salary=24000))
    return compute_tax(inputs, load_tax_rules(2025))


@pytest.fixture
def couple_result():
    inputs = TaxInputs(
        situation="married",
        dependent_count=1,
        declarant1=DeclarantInputs(gross_salary=45000),
        declarant2=DeclarantInputs(gross_salary=35000),
    )
    return compute_tax(inputs, load_tax_rules(2025))


def rows_by_item(text):
    reader = csv.reader(io.StringIO(text))
    next(reader)
    return {(section, item): value for section, item, value in reader}


class TestResultToDict:

    def test_json_serializable(self, couple_result):
        data = result_to_dict(couple_result)

        assert json.loads(json.dumps(data)) == data
        assert data["final_tax"] == 6139
        assert data["capping"]["was_capped"] is True
        assert data["bracket_breakdown"][0]["rate"] == 0


class TestCsv:

    def test_header_and_items(self, single_result):
        text = result_to_csv_string(single_result)
        rows = rows_by_item(text)

        assert text.splitlines()[0] == "section,item,value"
        assert rows[("income", "taxable_income")] == "21600.00"
        assert rows[("tax", "final_tax")] == "725.00"
        assert rows[("tax", "decote")] == "386.27"
        assert rows[("brackets", "11%")] == "10103.00"

    def test_write_file(self, couple_result, tmp_path):
        output = write_result_csv(couple_result, tmp_path / "result.csv")

        rows = rows_by_item(output.read_text())
        assert rows[("tax", "capped")] == "True"
        assert rows[("tax", "total_tax")] == "6139.00"


class TestTextReport:

    def test_single(self, single_result):
        text = format_result_text(single_result)

        assert "INCOME TAX SIMULATION 2025 (Single)" in text
        assert "Décote" in text
        assert "TOTAL" in text
        assert "Declarant 2" not in text

    def test_couple_shows_capping(self, couple_result):
        text = format_result_text(couple_result)

        assert "(Married)" in text
        assert "capped basis of 2 part(s)" in text
        assert "After quotient capping" in text
        assert "Declarant 2" in text
        assert "6,139" in text
