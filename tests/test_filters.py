from datetime import datetime

from hostelbite.jinjafilters.filters import format_price, format_slot, hostel_block_name


def test_format_price():
    assert format_price(40) == "₹40"
    assert format_price(1200) == "₹1,200"
    assert format_price(None) == ""


def test_hostel_block_name():
    assert hostel_block_name("new-block") == "New block hostel"
    assert hostel_block_name("annex") == "annex"


def test_format_slot_reads_stored_utc():
    # 18:00 UTC is 11:30 PM in Kolkata
    assert format_slot(datetime(2025, 1, 10, 18, 0)) == "11:30 PM"
    assert format_slot(None) == ""


def test_filters_registered(app):
    assert "format_price" in app.jinja_env.filters
    assert "hostel_block_name" in app.jinja_env.filters
