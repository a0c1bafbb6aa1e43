"""Tidy-data reshaping.

Thin wrappers over pandas melt / pivot / str.extract with the argument names
used in the lessons (pivot_longer, pivot_wider, separate, unite). They add the
checks students trip over: ambiguous column selection, names that do not match
a pattern, and duplicate keys that would silently aggregate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

import pandas as pd

_DEFAULT_SEP = r"[^0-9A-Za-z]+"


class ReshapeError(ValueError):
    """Raised when a reshaping request does not fit the data."""


@dataclass(frozen=True)
class TidyReport:
    keys: tuple[str, ...]
    n_rows: int
    duplicate_rows: int = 0
    null_key_columns: tuple[str, ...] = ()
    notes: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.duplicate_rows == 0 and not self.null_key_columns


def _check_columns(df: pd.DataFrame, cols: Iterable[str], what: str) -> list[str]:
    cols = list(cols)
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ReshapeError(f"{what}: columns not found: {missing}")
    return cols


def _select_columns(df: pd.DataFrame, cols: Optional[Sequence[str]], cols_pattern: Optional[str]) -> list[str]:
    if (cols is None) == (cols_pattern is None):
        raise ReshapeError("pivot_longer: pass exactly one of cols or cols_pattern")
    if cols is not None:
        selected = _check_columns(df, cols, "pivot_longer")
    else:
        rx = re.compile(str(cols_pattern))
        selected = [c for c in df.columns if rx.search(str(c))]
    if not selected:
        raise ReshapeError("pivot_longer: no columns selected")
    return selected


def pivot_longer(
    df: pd.DataFrame,
    cols: Optional[Sequence[str]] = None,
    *,
    cols_pattern: Optional[str] = None,
    names_to: Union[str, Sequence[str]] = "name",
    values_to: str = "value",
    names_pattern: Optional[str] = None,
    drop_na: bool = False,
) -> pd.DataFrame:
    """Wide to long: one row per (id columns, selected column).

    With several `names_to`, `names_pattern` must have one capture group per
    name; every selected column name has to match it.
    """
    selected = _select_columns(df, cols, cols_pattern)
    id_cols = [c for c in df.columns if c not in selected]

    names = [names_to] if isinstance(names_to, str) else list(names_to)
    if not names:
        raise ReshapeError("pivot_longer: names_to must not be empty")
    clashes = [c for c in [*names, values_to] if c in id_cols]
    if clashes:
        raise ReshapeError(f"pivot_longer: output columns clash with id columns: {clashes}")
    if len(names) > 1 and names_pattern is None:
        raise ReshapeError("pivot_longer: several names_to need a names_pattern")

    long = df.melt(id_vars=id_cols, value_vars=selected, var_name="__name__", value_name=values_to)

    if names_pattern is None:
        long = long.rename(columns={"__name__": names[0]})
    else:
        rx = re.compile(names_pattern)
        if rx.groups != len(names):
            raise ReshapeError(
                f"pivot_longer: names_pattern has {rx.groups} group(s) but names_to has {len(names)}"
            )
        unmatched = [c for c in selected if not rx.match(str(c))]
        if unmatched:
            raise ReshapeError(f"pivot_longer: column names do not match names_pattern: {unmatched[:5]}")
        parts = long["__name__"].astype(str).str.extract(rx)
        parts.columns = names
        long = pd.concat([long.drop(columns="__name__"), parts], axis=1)
        long = long[[*id_cols, *names, values_to]]

    if drop_na:
        long = long.dropna(subset=[values_to])
    return long.reset_index(drop=True)


def pivot_wider(
    df: pd.DataFrame,
    names_from: str,
    values_from: str,
    id_cols: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Long to wide. Duplicate (id, name) pairs are an error, never aggregated."""
    _check_columns(df, [names_from, values_from], "pivot_wider")
    ids = list(id_cols) if id_cols is not None else [c for c in df.columns if c not in (names_from, values_from)]
    _check_columns(df, ids, "pivot_wider")
    if not ids:
        raise ReshapeError("pivot_wider: no id columns left to identify rows")

    dupes = df.duplicated(subset=[*ids, names_from], keep=False)
    if dupes.any():
        sample = df.loc[dupes, [*ids, names_from]].head(3).to_dict("records")
        raise ReshapeError(f"pivot_wider: {int(dupes.sum())} rows share id and name, e.g. {sample}")

    wide = df.pivot(index=ids, columns=names_from, values=values_from).reset_index()
    wide.columns.name = None
    wide.columns = [str(c) for c in wide.columns]
    return wide


def separate(
    df: pd.DataFrame,
    col: str,
    into: Sequence[str],
    *,
    sep: str = _DEFAULT_SEP,
    regex: Optional[str] = None,
    remove: bool = True,
) -> pd.DataFrame:
    """Split one character column into several.

    `regex` (one group per output column) takes precedence over `sep`. A
    multi-character `sep` is treated as a regular expression. Missing pieces
    become NaN.
    """
    _check_columns(df, [col], "separate")
    into = list(into)
    if not into:
        raise ReshapeError("separate: into must name at least one column")
    s = df[col].astype("string")

    if regex is not None:
        rx = re.compile(regex)
        if rx.groups != len(into):
            raise ReshapeError(f"separate: regex has {rx.groups} group(s) but into has {len(into)}")
        parts = s.str.extract(rx)
    else:
        parts = s.str.split(sep, n=len(into) - 1, expand=True, regex=len(sep) > 1)
        parts = parts.reindex(columns=range(len(into)))
    parts.columns = into

    out = df.copy()
    pos = list(out.columns).index(col)
    if remove:
        out = out.drop(columns=[col])
    else:
        pos += 1
    for offset, name in enumerate(into):
        if name in out.columns:
            raise ReshapeError(f"separate: output column already exists: {name}")
        out.insert(pos + offset, name, parts[name].astype(object).where(parts[name].notna(), None))
    return out


def unite(df: pd.DataFrame, col: str, cols: Sequence[str], *, sep: str = "_", remove: bool = True) -> pd.DataFrame:
    """Paste several columns into one; missing values are written as NA."""
    cols = _check_columns(df, cols, "unite")
    if not cols:
        raise ReshapeError("unite: cols must not be empty")
    pieces = [df[c].astype(object).where(df[c].notna(), "NA").astype(str) for c in cols]
    joined = pieces[0]
    for p in pieces[1:]:
        joined = joined + sep + p

    out = df.copy()
    pos = min(list(out.columns).index(c) for c in cols)
    if remove:
        out = out.drop(columns=cols)
    out.insert(min(pos, len(out.columns)), col, joined)
    return out


def is_tidy(df: pd.DataFrame, keys: Sequence[str]) -> TidyReport:
    """Check that `keys` identify each row exactly once and are never missing."""
    keys = _check_columns(df, keys, "is_tidy")
    dupes = int(df.duplicated(subset=keys, keep=False).sum()) if keys else 0
    null_keys = tuple(c for c in keys if df[c].isna().any())
    notes = []
    if dupes:
        notes.append(f"{dupes} rows share the same key; each observation should appear once.")
    if null_keys:
        notes.append(f"Key columns with missing values: {list(null_keys)}")
    return TidyReport(
        keys=tuple(keys),
        n_rows=int(len(df)),
        duplicate_rows=dupes,
        null_key_columns=null_keys,
        notes=notes,
    )


def format_age_group(code: str) -> str:
    """WHO age codes: '014' -> '0-14', '1524' -> '15-24', '65' -> '65+'."""
    code = str(code)
    if len(code) == 2:
        return f"{code}+"
    if len(code) == 3:
        return f"{code[0]}-{code[1:]}"
    if len(code) == 4:
        return f"{code[:2]}-{code[2:]}"
    return code


def tidy_tb(df: pd.DataFrame) -> pd.DataFrame:
    """
    The WHO tuberculosis example: one column per diagnosis/sex/age becomes
    (country, year, diagnosis, sex, age, cases).
    """
    value_cols = [c for c in df.columns if str(c).startswith("new")]
    if not value_cols:
        raise ReshapeError("tidy_tb: no 'new*' count columns found")
    id_cols = [c for c in ("country", "iso2", "iso3", "year") if c in df.columns]
    if "country" not in id_cols or "year" not in id_cols:
        raise ReshapeError("tidy_tb: country and year columns are required")

    # newrel_m014 is spelled without the underscore in the source data.
    renamed = {c: re.sub(r"^newrel", "new_rel", str(c)) for c in value_cols}
    wide = df[[*id_cols, *value_cols]].rename(columns=renamed)

    long = pivot_longer(
        wide,
        cols=list(renamed.values()),
        names_to=["diagnosis", "sex", "age"],
        values_to="cases",
        names_pattern=r"new_?(.*)_(.)(.*)",
        drop_na=True,
    )
    long["age"] = long["age"].map(format_age_group)
    long["cases"] = pd.to_numeric(long["cases"], errors="coerce").astype("int64")
    return long


def tidy_bacteria(df: pd.DataFrame) -> pd.DataFrame:
    """Abundance columns (one per taxon) become (subject, day, taxon, abundance)."""
    _check_columns(df, ["subject", "day"], "tidy_bacteria")
    taxa = [c for c in df.columns if c not in ("subject", "day") and pd.api.types.is_numeric_dtype(df[c])]
    if not taxa:
        raise ReshapeError("tidy_bacteria: no numeric taxon columns found")
    long = pivot_longer(df[["subject", "day", *taxa]], cols=taxa, names_to="taxon", values_to="abundance")
    return long.sort_values(["subject", "taxon", "day"]).reset_index(drop=True)
