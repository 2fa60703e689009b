# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from dataverse_schema.query import aggregate, average, count, groupby, max_, min_, query, sum_


def test_aggregation_expressions():
    assert average("price") == "price with average as price"
    assert sum_("price", "total") == "price with sum as total"
    assert min_("price") == "price with min as price"
    assert max_("price", "top_price") == "price with max as top_price"
    assert count() == "$count as count"
    assert count("n") == "$count as n"


def test_aggregate_drops_empty_expressions():
    assert aggregate(average("price"), None, count()) == "aggregate(price with average as price,$count as count)"


def test_groupby():
    assert groupby(["category", "", "region"]) == "groupby((category,region))"
    assert groupby(["category"], aggregate(sum_("revenue"))) == (
        "groupby((category),aggregate(revenue with sum as revenue))"
    )


def test_apply_in_query_string():
    assert query(apply=aggregate(count())) == "$apply=aggregate($count%20as%20count)"
