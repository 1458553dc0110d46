import pytest

from density_utils import cli
from density_utils.ingredients.models import Completion


class FakeService:
    def __init__(self, model_id, region_name="eu-west-1"):
        self.model_id = model_id
        self.region_name = region_name

    def invoke(self, turns, params):
        if "plain flour" in turns[1].text:
            return Completion(" HIGH, Match flour")
        return Completion("NO MATCH")


@pytest.fixture
def inputs(tmp_path):
    reference = tmp_path / "reference.csv"
    reference.write_text(
        "id,ingredient,normalised_form,density,source\n1,Flour,flour,0.593,usda\n",
        encoding="utf-8",
    )
    missing = tmp_path / "missing.csv"
    missing.write_text(
        "popularity,density_ingredient,action,match_to,density,example\n"
        "10,plain flour,,,,2 cups plain flour\n"
        "9,gravel,,,,a handful of gravel\n",
        encoding="utf-8",
    )
    return reference, missing


def test_main_writes_output(inputs, tmp_path, mocker):
    mocker.patch.object(cli, "BedrockCompletionService", FakeService)
    reference, missing = inputs
    out = tmp_path / "filled.csv"

    status = cli.main(
        [
            "--model", "test_model",
            "--reference", str(reference),
            "--missing", str(missing),
            "--limit", "0",
            "--out", str(out),
        ]
    )

    assert status == 0
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[1:] == [
        "10,plain flour,AUTO-FILL,flour,0.593000,2 cups plain flour,HIGH",
        "9,gravel,NO-MATCH,,,a handful of gravel,NO MATCH",
    ]


def test_main_default_limit_is_one(inputs, tmp_path, mocker):
    mocker.patch.object(cli, "BedrockCompletionService", FakeService)
    reference, missing = inputs
    out = tmp_path / "filled.csv"

    cli.main(
        ["--model", "m", "--reference", str(reference), "--missing", str(missing), "--out", str(out)]
    )

    assert len(out.read_text(encoding="utf-8").splitlines()) == 2


def test_main_missing_input(tmp_path, mocker):
    mocker.patch.object(cli, "BedrockCompletionService", FakeService)
    status = cli.main(
        ["--model", "m", "--reference", str(tmp_path / "nope.csv")]
    )
    assert status == 1


def test_main_requires_model():
    with pytest.raises(SystemExit):
        cli.main([])
