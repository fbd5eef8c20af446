import io

from espflash.progress import EspflashProgress, format_image_size


def test_app_size_without_partition():
    assert format_image_size(1000, None) == "App size:          1000 bytes".replace(
        "1000", "1,000"
    )


def test_app_size_with_partition():
    assert format_image_size(500, 1000) == "App/part. size:    500/1,000 bytes, 50.00%"


def test_app_size_full_partition_is_hundred_percent():
    assert format_image_size(2048, 2048).endswith("100.00%")


def test_small_app_size_has_no_separator():
    text = format_image_size(999, None)
    assert "999 bytes" in text
    assert "," not in text


def test_position_is_none_before_init():
    progress = EspflashProgress(file=io.StringIO())
    progress.update(10)
    progress.finish()
    assert progress.position is None


def test_update_moves_position():
    progress = EspflashProgress(file=io.StringIO())
    progress.init(0x1000, 4096)
    assert progress.position == 0
    progress.update(2048)
    assert progress.position == 2048
    progress.finish()


def test_finish_completes_bar():
    progress = EspflashProgress(file=io.StringIO())
    progress.init(0x10000, 300)
    progress.update(100)
    progress.finish()
    assert progress.position == 300


def test_bar_shows_address_in_hex():
    out = io.StringIO()
    progress = EspflashProgress(file=out)
    progress.init(0x1A2B, 10)
    progress.finish()
    assert "0x1A2B" in out.getvalue()