"""
牙位工具：FDI 牙位码值类型 + 桥体范围推导。

FDI 记法：两位数字 "QT"
  Q — 象限 1..4（右上 / 左上 / 左下 / 右下）
  T — 距中线的位置 1..8

ToothCode 接受任何输入（setter 必须是全函数），
格式不合法的牙位码只会让下游校验失败，永远不会抛异常。
"""

import re
from dataclasses import dataclass, field
from collections.abc import Iterable

FDI_RE = re.compile(r"^[1-4][1-8]$")

# 嵌体/高嵌体牙面：近中 / 咬合 / 远中 / 颊 / 舌
SURFACES = "MODBL"
SURFACE_RE = re.compile(r"^[MODBL]{1,5}$")
DEFAULT_SURFACE = "O"


class ToothCode(str):
    """
    校验过的 FDI 牙位码。

    继承 str，所以可以直接当 dict key、和普通字符串比较、按字典序排序
    （同象限内字典序 == 位置序）。
    """

    __slots__ = ()

    def __new__(cls, value=""):
        return super().__new__(cls, "" if value is None else str(value).strip())

    @classmethod
    def of(cls, quadrant: int, position: int) -> "ToothCode":
        return cls(f"{quadrant}{position}")

    @property
    def is_valid(self) -> bool:
        return bool(FDI_RE.match(self))

    @property
    def quadrant(self) -> int | None:
        return int(self[0]) if self.is_valid else None

    @property
    def position(self) -> int | None:
        return int(self[1]) if self.is_valid else None


def as_teeth(values) -> list[ToothCode]:
    """
    任意输入 → ToothCode 列表，保持顺序并去重。

    单个 str / int 当作一颗牙（"36" 不会被拆成 "3"、"6"），
    不可迭代的值当作空列表。
    """
    if values is None or values == "":
        return []
    if isinstance(values, (str, int)):
        values = [values]
    elif not isinstance(values, Iterable):
        return []

    result: list[ToothCode] = []
    for value in values:
        tooth = ToothCode(value)
        if tooth not in result:
            result.append(tooth)
    return result


def all_valid(teeth: Iterable) -> bool:
    return all(ToothCode(t).is_valid for t in teeth)


def toggle_member(items: list, item) -> list:
    """对称差切换：存在则移除，不存在则追加到末尾。返回新列表。"""
    if item in items:
        return [i for i in items if i != item]
    return [*items, item]


def is_valid_surface(pattern) -> bool:
    """牙面组合必须非空、只含 M/O/D/B/L、且每个字母最多出现一次（例如 "MOD"）。"""
    if not isinstance(pattern, str):
        return False
    return bool(SURFACE_RE.match(pattern)) and len(set(pattern)) == len(pattern)


# ── 桥体范围推导 ───────────────────────────────────────────────────────────

@dataclass
class BridgeSpan:
    """
    桥体跨度及默认的基牙 / 桥体牙划分。

    span       起止牙之间（含）的全部牙位，按位置升序
    abutments  基牙（戴冠，承重）
    pontics    桥体牙（缺失位，由人工牙替代）
    """

    span: list[ToothCode] = field(default_factory=list)
    abutments: list[ToothCode] = field(default_factory=list)
    pontics: list[ToothCode] = field(default_factory=list)

    @property
    def units(self) -> int:
        return len(self.span)


def derive_range(start, end) -> BridgeSpan:
    """
    计算 start..end 的桥体跨度。

    - 跨象限（或牙位码不合法）→ 空跨度，units=0。跨象限桥不支持，属于策略而非错误。
    - 跨度 >= 2 颗：首尾为基牙，中间为桥体牙
    - 跨度 == 1 颗：唯一的一颗作为基牙，没有桥体牙

    纯函数：相同输入永远得到相同划分。
    """
    first, last = ToothCode(start), ToothCode(end)
    if not (first.is_valid and last.is_valid) or first.quadrant != last.quadrant:
        return BridgeSpan()

    low, high = sorted((first.position, last.position))
    span = [ToothCode.of(first.quadrant, pos) for pos in range(low, high + 1)]

    if len(span) >= 2:
        return BridgeSpan(span=span, abutments=[span[0], span[-1]], pontics=span[1:-1])
    return BridgeSpan(span=span, abutments=list(span), pontics=[])
