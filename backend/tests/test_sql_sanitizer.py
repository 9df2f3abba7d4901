"""
Tests for extracting SQL from free-text model output.
"""

from app.services.sql_sanitizer import clean_sql_response


def test_strips_sql_fence_and_joins_lines():
    text = "```sql\nSELECT SUM(total_revenue)\nFROM total_sales_metrics\nLIMIT 1;\n```"
    assert clean_sql_response(text) == "SELECT SUM(total_revenue) FROM total_sales_metrics LIMIT 1;"


def test_strips_bare_fence_and_uppercase_tag():
    assert clean_sql_response("```\nSELECT * FROM ad_sales_metrics\n```") == "SELECT * FROM ad_sales_metrics"
    assert clean_sql_response("```SQL\nSELECT * FROM ad_sales_metrics\n```") == "SELECT * FROM ad_sales_metrics"


def test_drops_commentary_lines():
    text = (
        "Here is the query you asked for:\n\n"
        "SELECT product_name, roas\n"
        "FROM ad_sales_metrics\n"
        "WHERE roas > 4\n"
        "  AND clicks > 100\n"
        "ORDER BY roas DESC\n"
        "LIMIT 5\n\n"
        "This returns the best performing products."
    )
    assert clean_sql_response(text) == (
        "SELECT product_name, roas FROM ad_sales_metrics WHERE roas > 4 "
        "AND clicks > 100 ORDER BY roas DESC LIMIT 5"
    )


def test_keeps_inline_select_from_sentence():
    text = "The answer: use select * from eligibility_table please"
    assert clean_sql_response(text) == text


def test_group_by_and_or_lines_survive():
    text = "SELECT category, SUM(total_revenue)\nFROM total_sales_metrics\nGROUP BY category\nOR 1=1"
    assert clean_sql_response(text) == (
        "SELECT category, SUM(total_revenue) FROM total_sales_metrics GROUP BY category OR 1=1"
    )


def test_no_sql_lines_gives_empty_string():
    assert clean_sql_response("I cannot answer that question.") == ""
    assert clean_sql_response("") == ""


def test_idempotent_on_single_line_select():
    sql = "SELECT product_name FROM ad_sales_metrics ORDER BY roas DESC LIMIT 10"
    once = clean_sql_response(sql)
    assert once == sql
    assert clean_sql_response(once) == once
