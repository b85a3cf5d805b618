"""Tests for the dataset registry and program code binding."""

import pytest

from subsidy_scraper.config import ScraperConfig
from subsidy_scraper.datasets import DATASETS, get_dataset
from subsidy_scraper.regions import Region


class TestGetDataset:
    """Tests for looking up registered modes."""

    def test_unknown_name_lists_valid_datasets(self):
        with pytest.raises(KeyError, match="Valid datasets"):
            get_dataset("dairy")

    def test_fixed_dataset_returned_as_registered(self):
        assert get_dataset("livestock") is DATASETS["livestock"]

    def test_fixed_dataset_rejects_program_code(self):
        with pytest.raises(ValueError, match="does not take a program code"):
            get_dataset("livestock", "cotton")

    def test_program_requires_code(self):
        with pytest.raises(ValueError, match="requires a program code"):
            get_dataset("program")

    @pytest.mark.parametrize("code", ["", "../x", "a b", "cotton&fips=1"])
    def test_malformed_code_rejected(self, code):
        with pytest.raises(ValueError, match="Invalid program code"):
            get_dataset("program", code)


class TestProgramDataset:
    """The free-form EWG program mode."""

    def test_url_and_path_use_program_code(self):
        dataset = get_dataset("program", "total_conservation")
        url = dataset.url(ScraperConfig(), Region("19000", "19000"))
        assert url == (
            "https://farm.ewg.org/progdetail.php"
            "?fips=19000&progcode=total_conservation"
        )
        assert dataset.output_path("Iowa") == "total_conservation/Iowa.tsv"

    def test_registry_entry_left_unbound(self):
        get_dataset("program", "cotton")
        assert DATASETS["program"].progcode is None

    def test_fixed_paths_unchanged(self):
        assert DATASETS["livestock"].output_path("Iowa") == "livestock/Iowa.tsv"
        assert DATASETS["spending"].output_path("Iowa") == "spending/year_Iowa.tsv"
