# Joint, Member, Support and the editable TrussDesign

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .catalog import DEFAULT_STOCK, Material, Shape, Stock, most_common_stock
from .conditions import DesignConditions


class ModelError(ValueError):
    """Malformed structure: dangling joint reference, zero-length or duplicate member."""
    pass


class Support(Enum):
    """
    Joint boundary condition.

    ROLLER_X rolls along x (y is restrained); ROLLER_Y rolls along y
    (x is restrained).
    """
    FREE = "free"
    PIN = "pin"
    ROLLER_X = "roller_x"
    ROLLER_Y = "roller_y"

    @property
    def restrains_x(self) -> bool:
        return self in (Support.PIN, Support.ROLLER_Y)

    @property
    def restrains_y(self) -> bool:
        return self in (Support.PIN, Support.ROLLER_X)


@dataclass(frozen=True)
class Joint:
    id: int
    x: float
    y: float
    support: Support = Support.FREE

    @property
    def is_support(self) -> bool:
        return self.support != Support.FREE


@dataclass(frozen=True)
class Member:
    """
    Axial-only bar between joints a and b, cut from the given stock.
    """
    id: int
    a: int
    b: int
    material: Material
    shape: Shape

    @property
    def stock(self) -> Stock:
        return Stock(self.material, self.shape)

    def joint_pair(self) -> Tuple[int, int]:
        """Unordered joint pair, used for duplicate detection."""
        return (self.a, self.b) if self.a <= self.b else (self.b, self.a)


StructureListener = Callable[["TrussDesign"], None]


class TrussDesign:
    """
    Editable truss owned by the editor.

    Every mutation bumps `version` and fires the structure-change listeners.
    Analysis code only reads it, except Autofix and the transected-member
    fixup, which go through add_member/remove_member like any other edit.
    """

    def __init__(self, conditions: DesignConditions,
                 joints: Optional[List[Joint]] = None,
                 members: Optional[List[Member]] = None):
        self.conditions = conditions
        self._joints: List[Joint] = list(joints or [])
        self._members: List[Member] = list(members or [])
        self.version = 0
        self._listeners: List[StructureListener] = []
        # Ids are never reused, even after the highest-numbered item is removed
        self._next_joint_id = max((j.id for j in self._joints), default=-1) + 1
        self._next_member_id = max((m.id for m in self._members), default=-1) + 1

    @classmethod
    def from_conditions(cls, conditions: DesignConditions) -> "TrussDesign":
        """New design holding only the deck joints: pin at left, roller at right."""
        positions = conditions.deck_joint_positions()
        last = len(positions) - 1
        joints = []
        for i, (x, y) in enumerate(positions):
            support = Support.PIN if i == 0 else Support.ROLLER_X if i == last else Support.FREE
            joints.append(Joint(i, x, y, support))
        return cls(conditions, joints)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def joints(self) -> Tuple[Joint, ...]:
        return tuple(self._joints)

    @property
    def members(self) -> Tuple[Member, ...]:
        return tuple(self._members)

    def joint(self, joint_id: int) -> Joint:
        for j in self._joints:
            if j.id == joint_id:
                return j
        raise KeyError(joint_id)

    def member_between(self, a: int, b: int) -> Optional[Member]:
        pair = (a, b) if a <= b else (b, a)
        for m in self._members:
            if m.joint_pair() == pair:
                return m
        return None

    def most_common_stock(self) -> Stock:
        return most_common_stock((m.stock for m in self._members), DEFAULT_STOCK)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def add_listener(self, listener: StructureListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StructureListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self) -> None:
        self.version += 1
        for listener in list(self._listeners):
            listener(self)

    def add_joint(self, x: float, y: float, support: Support = Support.FREE) -> Joint:
        joint = Joint(self._next_joint_id, float(x), float(y), support)
        self._next_joint_id += 1
        self._joints.append(joint)
        self._changed()
        return joint

    def add_member(self, a: int, b: int, stock: Optional[Stock] = None) -> Member:
        stock = stock or self.most_common_stock()
        member = Member(self._next_member_id, a, b, stock.material, stock.shape)
        self._next_member_id += 1
        self._members.append(member)
        self._changed()
        return member

    def remove_member(self, member_id: int) -> Member:
        for i, m in enumerate(self._members):
            if m.id == member_id:
                del self._members[i]
                self._changed()
                return m
        raise KeyError(member_id)
