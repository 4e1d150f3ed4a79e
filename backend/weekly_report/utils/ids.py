# backend/weekly_report/utils/ids.py

"""
Notion の ID 正規化。

URL からコピーした 32 桁の ID はハイフンを含まないため、
API が期待する 8-4-4-4-12 形式に変換する。
"""

import re

_HEX_ID = re.compile(
    r"^([0-9a-fA-F]{8})([0-9a-fA-F]{4})([0-9a-fA-F]{4})([0-9a-fA-F]{4})([0-9a-fA-F]{12})$"
)


def normalize_notion_id(raw_id: str) -> str:
    """
    32 桁の16進 ID をハイフン区切りに変換する。

    - すでにハイフンを含む場合はそのまま返す
    - パターンに一致しない場合もエラーにせずそのまま返す
    """
    if "-" in raw_id:
        return raw_id

    match = _HEX_ID.match(raw_id)
    if match is None:
        return raw_id

    return "-".join(match.groups())
