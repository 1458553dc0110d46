import pytest

from density_utils.ingredients.models import (
    Action,
    MissingIngredient,
    ReferenceIngredient,
    Resolution,
)
from density_utils.tables import (
    MISSING_HEADER,
    load_missing_csv,
    load_reference_csv,
    open_output_writer,
    parse_missing_row,
    parse_reference_row,
    save_missing_csv,
    save_reference_csv,
)


@pytest.fixture
def reference_csv(tmp_path):
    path = tmp_path / "density_reference.csv"
    path.write_text(
        "id,ingredient,normalised_form,density,source\n"
        "1,Flour,flour,0.593,usda\n"
        ",Sugar,sugar,0.8-0.9,manual\n"
        "x,Salt,salt,1.2,usda\n"
        "4,Butter,butter,abc,usda\n"
        "5,\"Milk, whole\",milk,1.03,usda\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def missing_csv(tmp_path):
    path = tmp_path / "missing_ingredients.csv"
    path.write_text(
        "popularity,density_ingredient,action,match_to,density,example\n"
        "10,plain flour,,,,2 cups plain flour\n"
        "nope,caster sugar,,,,1 cup caster sugar\n"
        "3,whole milk,REVIEW,milk,1.03,a splash of milk\n",
        encoding="utf-8",
    )
    return path


def test_load_reference_csv_skips_bad_rows(reference_csv, caplog):
    references = load_reference_csv(reference_csv)

    assert [r.normalised for r in references] == ["flour", "sugar", "milk"]
    assert references[0] == ReferenceIngredient(1, "Flour", "flour", 0.593, "usda")
    assert references[1].id is None
    assert references[1].density == pytest.approx(0.9)
    assert references[2].ingredient == "Milk, whole"
    assert "row 3" in caplog.text
    assert "row 4" in caplog.text


def test_load_missing_csv(missing_csv):
    records = load_missing_csv(missing_csv)

    assert [r.ingredient for r in records] == ["plain flour", "whole milk"]
    assert records[0].resolution == Resolution()
    assert records[0].example == "2 cups plain flour"
    assert records[1].action is Action.REVIEW
    assert records[1].match_to == "milk"
    assert records[1].density == pytest.approx(1.03)
    assert records[1].confidence is None


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_reference_csv(tmp_path / "absent.csv")


@pytest.mark.parametrize(
    "row",
    [
        ["1", "Flour", "flour", "0.5"],
        ["1.5", "Flour", "flour", "0.5", "usda"],
        ["1", "Flour", "flour", "", "usda"],
    ],
)
def test_parse_reference_row_invalid(row):
    with pytest.raises(ValueError):
        parse_reference_row(row)


def test_parse_missing_row_with_confidence():
    record = parse_missing_row(
        ["7", "tomato sauce", "NO MATCH", "", "", "1 jar", "NO MATCH"]
    )
    assert record.action is Action.NO_MATCH
    assert record.confidence == "NO MATCH"
    assert record.density is None


@pytest.mark.parametrize(
    "row",
    [
        ["1", "flour", "", "", ""],
        ["1", "flour", "", "", "heavy", "example"],
        ["1", "flour", "MAYBE", "", "", "example"],
    ],
)
def test_parse_missing_row_invalid(row):
    with pytest.raises(ValueError):
        parse_missing_row(row)


def test_save_and_reload_reference(tmp_path, references):
    path = tmp_path / "out.csv"
    save_reference_csv(path, references)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "id,ingredient,normalised_form,density,source"
    assert lines[3] == ",\"Milk, whole\",milk,1.030000,manual"
    assert load_reference_csv(path) == references


def test_save_missing_csv(tmp_path, record):
    path = tmp_path / "missing.csv"
    save_missing_csv(path, [record])
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ",".join(MISSING_HEADER)
    assert lines[1] == "12,plain flour,,,,2 cups plain flour,"


def test_output_writer_flushes_each_row(tmp_path):
    path = tmp_path / "filled.csv"
    record = MissingIngredient(
        popularity=5,
        ingredient="plain flour",
        example="2 cups",
        resolution=Resolution(Action.AUTO_FILL, "flour", 0.593, "HIGH"),
    )

    with open_output_writer(path) as writer:
        writer.write(record)
        # Readable before the writer is closed
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines == [
            ",".join(MISSING_HEADER),
            "5,plain flour,AUTO-FILL,flour,0.593000,2 cups,HIGH",
        ]
    assert writer.results_written == 1
    assert writer.output_handle is None


def test_load_reference_csv_skips_short_rows(tmp_path, caplog):
    path = tmp_path / "density_reference.csv"
    path.write_text(
        "id,ingredient,normalised_form,density,source\n"
        "1,Flour,flour,0.593,usda\n"
        "2,Oil,oil\n"
        "3,Salt,salt,1.2,\n",
        encoding="utf-8",
    )

    references = load_reference_csv(path)

    assert [r.normalised for r in references] == ["flour", "salt"]
    assert references[1].source == ""
    assert "row 2: unexpected number of fields: 3" in caplog.text


def test_load_reference_csv_skips_long_rows(tmp_path, caplog):
    path = tmp_path / "density_reference.csv"
    path.write_text(
        "id,ingredient,normalised_form,density,source\n"
        "1,Flour,flour,0.593,usda,extra\n"
        "2,Sugar,sugar,0.845,usda\n",
        encoding="utf-8",
    )

    references = load_reference_csv(path)

    assert [r.normalised for r in references] == ["sugar"]
    assert "row 1: unexpected number of fields: 6" in caplog.text


def test_load_missing_csv_keeps_confidence_without_header_column(tmp_path, caplog):
    path = tmp_path / "missing_ingredients.csv"
    path.write_text(
        "popularity,density_ingredient,action,match_to,density,example\n"
        "3,whole milk,REVIEW,milk,1.03,a splash of milk,LOW\n"
        "4,plain flour,,,,2 cups\n"
        "5,salt,,,\n",
        encoding="utf-8",
    )

    records = load_missing_csv(path)

    assert [r.ingredient for r in records] == ["whole milk", "plain flour"]
    assert records[0].confidence == "LOW"
    assert records[1].confidence is None
    assert "row 3: unexpected number of fields: 5" in caplog.text
