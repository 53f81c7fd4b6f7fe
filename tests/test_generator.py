import re
from datetime import datetime, timezone

from slog import generator
from slog.content import AccessLogLine

START = datetime(2020, 3, 20, 13, 30, tzinfo=timezone.utc)
KEY_PATTERN = re.compile(r"^root/\d{4}-\d{2}-\d{2}-\d{2}-\d{2}-\d{2}-[0-9A-F]{16}$")


def test_generated_keys_sort_by_time():
    objects = list(generator.generate_log_objects("root", START, 20))
    keys = [key for key, _ in objects]

    assert keys[0].startswith("root/2020-03-20-13-30-00-")
    assert all(KEY_PATTERN.match(key) for key in keys)
    assert keys == sorted(keys)


def test_generated_lines_are_complete():
    _, body = next(generator.generate_log_objects("root", START, 1, lines_per_object=3))
    lines = body.decode().splitlines()

    assert body.endswith(b"\n")
    assert len(lines) == 3
    for line in lines:
        entry = AccessLogLine.parse(line)
        assert entry.complete
        assert entry.field(1) in generator.SOURCE_BUCKETS
        assert entry.field(16).startswith('"') and entry.field(16).endswith('"')


def test_generation_is_repeatable():
    first = list(generator.generate_log_objects("root", START, 3))
    assert list(generator.generate_log_objects("root", START, 3)) == first


def test_local_writer(tmp_path, capsys):
    objects = list(generator.generate_log_objects("root", START, 3))
    generator.main(objects, generator._LocalWriter(tmp_path))

    for key, body in objects:
        assert (tmp_path / key).read_bytes() == body
    assert capsys.readouterr().out.count("writing ") == 3
