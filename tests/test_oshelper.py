import os
import time
from unittest import mock

from stunkit.oshelper import DEFAULT_CONSOLE_WIDTH, get_console_width, get_millisecond_counter


def test_counter_fits_in_32_bits():
    value = get_millisecond_counter()
    assert 0 <= value <= 0xFFFFFFFF


def test_counter_wraps_at_32_bits():
    with mock.patch("time.time_ns", return_value=(2**32 + 5) * 1_000_000):
        assert get_millisecond_counter() == 5


def test_counter_advances():
    first = get_millisecond_counter()
    time.sleep(0.02)
    second = get_millisecond_counter()
    elapsed = (second - first) & 0xFFFFFFFF
    assert 10 <= elapsed < 10_000


def test_console_width_from_terminal():
    with mock.patch("os.get_terminal_size", return_value=os.terminal_size((120, 40))):
        assert get_console_width() == 120


def test_console_width_falls_back_on_error():
    with mock.patch("os.get_terminal_size", side_effect=OSError):
        assert get_console_width() == DEFAULT_CONSOLE_WIDTH == 80


def test_console_width_falls_back_on_zero_columns():
    with mock.patch("os.get_terminal_size", return_value=os.terminal_size((0, 0))):
        assert get_console_width() == DEFAULT_CONSOLE_WIDTH