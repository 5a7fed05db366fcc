# -*- coding: utf-8 -*-
import itertools
import re

import pytest

from roster.config import HEADERS
from roster.settings import SettingsStore
from roster.store import EmployeeStore


# ----------------------------
# 가짜 워크시트 (gspread.Worksheet 중 실제로 쓰는 부분만)
# ----------------------------
_CELL_RE = re.compile(r"^([A-Z]*)(\d*)$")
_IDS = itertools.count(1)


def _col_num(letters: str) -> int:
    n = 0
    for ch in letters:
        n = n * 26 + (ord(ch) - 64)
    return n


def _parse_range(a1: str, nrows: int, ncols: int):
    """'A2:I' / 'B5' / 'A1:I1' → 0-based (r0, c0, r1, c1) exclusive end."""
    start, _, end = a1.partition(":")
    end = end or start
    sc, sr = _CELL_RE.match(start).groups()
    ec, er = _CELL_RE.match(end).groups()
    r0 = int(sr) - 1 if sr else 0
    c0 = _col_num(sc) - 1 if sc else 0
    r1 = int(er) if er else nrows
    c1 = _col_num(ec) if ec else ncols
    return r0, c0, r1, c1


class FakeWorksheet:
    def __init__(self, rows=None, title="Employees", row_count=20, col_count=10):
        self.title = title
        self.spreadsheet_id = f"book-{next(_IDS)}"
        self.row_count = max(row_count, len(rows or []))
        self.col_count = max([col_count] + [len(r) for r in (rows or [])])
        self.grid = [[""] * self.col_count for _ in range(self.row_count)]
        for i, r in enumerate(rows or []):
            for j, v in enumerate(r):
                self.grid[i][j] = str(v)
        self.formats = []
        self.frozen = None
        self.calls = []

    # 크기
    def add_rows(self, n):
        self.grid.extend([[""] * self.col_count for _ in range(n)])
        self.row_count += n

    def add_cols(self, n):
        for r in self.grid:
            r.extend([""] * n)
        self.col_count += n

    # 읽기
    def _last_row(self):
        for i in range(len(self.grid) - 1, -1, -1):
            if any(self.grid[i]):
                return i + 1
        return 0

    def get_all_values(self):
        last = self._last_row()
        if not last:
            return []
        width = max(j + 1 for r in self.grid[:last] for j, v in enumerate(r) if v)
        return [list(r[:width]) for r in self.grid[:last]]

    def col_values(self, col):
        vals = [r[col - 1] for r in self.grid]
        while vals and vals[-1] == "":
            vals.pop()
        return vals

    def row_values(self, row):
        vals = list(self.grid[row - 1]) if row <= len(self.grid) else []
        while vals and vals[-1] == "":
            vals.pop()
        return vals

    # 쓰기
    def update(self, range_name=None, values=None, value_input_option=None, **kwargs):
        self.calls.append(("update", range_name))
        r0, c0, _, _ = _parse_range(range_name, self.row_count, self.col_count)
        for i, row in enumerate(values):
            for j, v in enumerate(row):
                if r0 + i >= self.row_count or c0 + j >= self.col_count:
                    raise ValueError(f"Range {range_name} exceeds grid limits")
                self.grid[r0 + i][c0 + j] = str(v)
        return {"updatedRange": range_name}

    def append_row(self, values, value_input_option=None, table_range=None, **kwargs):
        self.calls.append(("append_row", values[0] if values else ""))
        idx = self._last_row()
        if idx >= self.row_count:
            self.add_rows(1)
        for j, v in enumerate(values):
            self.grid[idx][j] = str(v)

    def batch_clear(self, ranges):
        self.calls.append(("batch_clear", tuple(ranges)))
        for a1 in ranges:
            r0, c0, r1, c1 = _parse_range(a1, self.row_count, self.col_count)
            for i in range(r0, min(r1, self.row_count)):
                for j in range(c0, min(c1, self.col_count)):
                    self.grid[i][j] = ""

    def delete_rows(self, index, end_index=None):
        self.calls.append(("delete_rows", index))
        del self.grid[index - 1]
        self.row_count -= 1

    def format(self, ranges, fmt):
        self.formats.append((ranges, fmt))

    def freeze(self, rows=None, cols=None):
        self.frozen = rows


class FakeKV:
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


# ----------------------------
# fixtures
# ----------------------------
@pytest.fixture
def sheet():
    return FakeWorksheet([HEADERS])


@pytest.fixture
def store(sheet):
    return EmployeeStore(sheet)


@pytest.fixture
def kv():
    return FakeKV()


@pytest.fixture
def settings(kv):
    return SettingsStore(kv)


@pytest.fixture
def make_sheet():
    return FakeWorksheet
