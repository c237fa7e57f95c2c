import pytest

from blocktex.bptc_tables import (
    BPTC_ANCHOR2,
    BPTC_ANCHOR3,
    partition2_subset,
    partition3_subset,
)


@pytest.mark.parametrize("partition", range(64))
def test_two_subset_values_in_range(partition):
    subsets = {partition2_subset(partition, i) for i in range(16)}
    assert subsets == {0, 1}


@pytest.mark.parametrize("partition", range(64))
def test_first_pixel_in_subset_zero(partition):
    assert partition2_subset(partition, 0) == 0
    assert partition3_subset(partition, 0) == 0


@pytest.mark.parametrize("partition", range(64))
def test_two_subset_anchor_belongs_to_subset_one(partition):
    assert partition2_subset(partition, BPTC_ANCHOR2[partition]) == 1


@pytest.mark.parametrize("partition", range(64))
def test_three_subset_anchors_belong_to_their_subsets(partition):
    assert partition3_subset(partition, BPTC_ANCHOR3[0][partition]) == 1
    assert partition3_subset(partition, BPTC_ANCHOR3[1][partition]) == 2


@pytest.mark.parametrize("partition", range(64))
def test_three_subset_values_in_range(partition):
    subsets = {partition3_subset(partition, i) for i in range(16)}
    assert subsets == {0, 1, 2}


def test_first_two_subset_partition_splits_columns():
    for index in range(16):
        assert partition2_subset(0, index) == (1 if index % 4 >= 2 else 0)


def test_first_three_subset_partition_pins_values():
    expected = [0, 0, 1, 1, 0, 0, 1, 1, 0, 2, 2, 1, 2, 2, 2, 2]
    assert [partition3_subset(0, i) for i in range(16)] == expected