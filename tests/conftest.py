import os
import sys
import json
import zipfile

import pytest

# Make the package importable without installing it
PLUGINS_DIR = os.path.join(os.path.dirname(__file__), "..", "plugins")
if PLUGINS_DIR not in sys.path:
    sys.path.insert(0, PLUGINS_DIR)


def pad_record(name="1", x=0, y=0, rotation=0, drill=None, shape=None,
               orientation=None, mask=None, paste=None):
    """Build a PAD record, padded out to the margin fields when needed."""
    record = ["PAD", "e1", 0, "", 1, name, x, y, rotation, drill, shape]
    if orientation is not None or mask is not None or paste is not None:
        record.extend([None] * (21 - len(record)))
        record[14] = orientation
        record[18] = mask
        record[20] = paste
    return record


@pytest.fixture
def make_pad():
    return pad_record


@pytest.fixture
def sample_efoo():
    records = [
        ["DOCTYPE", "FOOTPRINT", "1.8"],
        ["HEAD", {"originX": 0, "originY": 0}],
        ["POLY", "e2", 0, "", 3, 6, [-50, 30, "L", 50, 30, 50, -30, -50, -30, -50, 30], 0],
        ["FILL", "e3", 0, "", 1, 0, 0, [[-10, -10, "L", 10, -10, 10, 10, -10, 10]]],
        ["PAD", "e4", 0, "", 1, "1", -40, 0, 0, None, ["RECT", 20, 30]],
        ["PAD", "e5", 0, "", 1, "2", 40, 0, 0, None, ["RECT", 20, 30]],
    ]
    return "\n".join(json.dumps(r) for r in records) + "\n"


@pytest.fixture
def make_elibz(tmp_path, sample_efoo):
    """Write an .elibz archive and return its path."""
    def _make(name="part", members=None, manifest=None):
        if manifest is None:
            manifest = {
                "symbols": {"s1": {"display_title": "SYM_TEST"}},
                "footprints": {"f1": {"display_title": "FP_TEST"}},
            }
        if members is None:
            members = {
                f"{name}.json": json.dumps(manifest),
                f"{name}.efoo": sample_efoo,
                f"{name}.esym": "",
            }
        path = tmp_path / f"{name}.elibz"
        with zipfile.ZipFile(path, "w") as archive:
            for member, data in members.items():
                archive.writestr(member, data)
        return path

    return _make
