"""Best-so-far intersection record shared by all primitives.

Every primitive test takes the caller's current record and returns a new
one. The returned record carries a strictly closer hit when the test found
one (``hit == 1``); otherwise it carries the incoming ``time`` and ``normal``
unchanged with ``hit == 0``. Threading a single record through several
tests therefore keeps the closest hit, and no state is mutated in place.
"""

import taichi as ti
import taichi.math as tm

from src.tracer.core.ray import T_MAX

vec3 = tm.vec3

# Degeneracy threshold for parallel rays and singular triangle systems.
# Distinct from the surface offset epsilon used for secondary rays.
PARALLEL_EPSILON = 1e-6


@ti.dataclass
class HitRecord:
    """Result of a primitive intersection test.

    Attributes:
        hit: 1 if this test recorded a strictly closer hit, 0 otherwise.
        time: Ray parameter of the best hit so far, in the tested space.
        normal: Surface normal at the best hit so far, in the tested space.
    """

    hit: ti.i32
    time: ti.f32
    normal: vec3


@ti.func
def make_empty_record() -> HitRecord:
    """Create a fresh record with no hit and time set to T_MAX."""
    return HitRecord(hit=0, time=T_MAX, normal=vec3(0.0, 0.0, 0.0))


@ti.func
def carry_record(record: HitRecord) -> HitRecord:
    """Return the incoming best-so-far values with the hit flag cleared."""
    return HitRecord(hit=0, time=record.time, normal=record.normal)
