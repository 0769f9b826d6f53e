import math

import pandas as pd
import pytest

from pqalign.elements.gene_group import GeneGroup
from pqalign.scoring import (
    DEFAULT_DELETION_COST,
    SubstitutionMatrix,
    constant_deletion_cost,
    no_substitutions_function,
)


def test_no_substitutions_function_ignores_strand():
    assert no_substitutions_function(GeneGroup.from_label("A+"), GeneGroup.from_label("A-")) == 1.0


def test_no_substitutions_function_forbids_other_ids():
    assert no_substitutions_function(GeneGroup.from_label("A"), GeneGroup.from_label("B")) == -math.inf


def test_constant_deletion_cost():
    assert constant_deletion_cost(2.5)(GeneGroup.from_label("A")) == 2.5
    assert constant_deletion_cost()(GeneGroup.from_label("A")) == DEFAULT_DELETION_COST


def test_constant_deletion_cost_must_be_non_negative():
    with pytest.raises(ValueError):
        constant_deletion_cost(-1.0)


def test_substitution_matrix_from_dataframe():
    frame = pd.DataFrame({"A": [1.0, 0.5], "B": [None, 2.0]}, index=["A", "B"])
    matrix = SubstitutionMatrix(frame)
    a, b = GeneGroup.from_label("A"), GeneGroup.from_label("B-")
    assert matrix(b, a) == 0.5
    assert matrix(a, b) == -math.inf
    assert matrix(b, b) == 2.0
