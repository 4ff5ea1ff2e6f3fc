# Copyright (c) 2025, 7th software Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Motion and collision primitives shared by both games.

Everything here is a pure function over plain numbers, or over a "body" - any object exposing
`x`, `y`, `r`, `dx` and `dy` attributes (a ball, for example). Nothing in this module knows about
scores, lives or effects.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Protocol

# Extra distance a body is pushed out of a rectangle after a bounce, so it doesn't stay overlapping
PUSH_EPSILON = 0.5

# Distance used in place of zero when a body's centre sits exactly on (or in) a rectangle
DEGENERATE_DISTANCE = 0.0001


class Body(Protocol):
    x: float
    y: float
    r: float
    dx: float
    dy: float


class Box(NamedTuple):
    """Axis-aligned rectangle with its top-left corner at (x, y)."""

    x: float
    y: float
    w: float
    h: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def inflate(self, pad: float) -> Box:
        """
        Grow the rectangle by `pad` pixels on every side.

        Args:
            pad: Padding in pixels. Negative values shrink the rectangle.

        Returns:
            Box: The padded rectangle.
        """

        return Box(self.x - pad, self.y - pad, self.w + pad * 2, self.h + pad * 2)

    def overlaps(self, other: Box) -> bool:
        """Strict overlap test (touching edges don't count)."""

        return (
            self.left < other.right
            and self.right > other.left
            and self.top < other.bottom
            and self.bottom > other.top
        )


class Contact(NamedTuple):
    """Result of a circle-rectangle test: unit normal pointing away from the rectangle, and the gap to cover."""

    nx: float
    ny: float
    distance: float
    reach: float


def substeps(dx: float, dy: float, r: float) -> int:
    """
    Work out how many equal increments a frame's displacement must be split into.

    Args:
        dx: Horizontal displacement this frame (pixels).
        dy: Vertical displacement this frame (pixels).
        r: Radius of the moving circle (pixels).

    Returns:
        int: At least 1. Each increment moves at most `max(1, r / 2)` pixels along either axis, so
             nothing thicker than that can be skipped over.
    """

    max_move = max(abs(dx), abs(dy))
    return max(1, math.ceil(max_move / max(1.0, r * 0.5)))


def closest_point(px: float, py: float, box: Box) -> tuple[float, float]:
    """Clamp a point into a rectangle, giving the rectangle point nearest to it."""

    cx = max(box.left, min(px, box.right))
    cy = max(box.top, min(py, box.bottom))
    return cx, cy


def circle_rect_contact(
    x: float,
    y: float,
    r: float,
    box: Box,
    vx: float = 0.0,
    vy: float = 0.0,
    pad: float = 0.0,
) -> Contact | None:
    """
    Test a moving circle against a rectangle using the closest point on the rectangle to the centre.

    Args:
        x: Circle centre X.
        y: Circle centre Y.
        r: Circle radius.
        box: Rectangle to test against.
        vx: Circle horizontal velocity, used only for the degenerate normal.
        vy: Circle vertical velocity, used only for the degenerate normal.
        pad: Extra contact distance around the rectangle.

    Behaviour:
        - The contact normal is the unit vector from the closest point to the centre.
        - If the centre is on or inside the rectangle (distance zero), the normal opposes the
          direction of travel instead, and straight up if the circle isn't moving.

    Returns:
        Contact | None: The contact when `distance <= r + pad`, else None.
    """

    cx, cy = closest_point(x, y, box)
    nx, ny = x - cx, y - cy
    distance = math.hypot(nx, ny)

    if distance == 0:
        speed = math.hypot(vx, vy)
        if speed == 0:
            nx, ny = 0.0, -1.0
        else:
            nx, ny = -vx / speed, -vy / speed
        distance = DEGENERATE_DISTANCE
    else:
        nx /= distance
        ny /= distance

    reach = r + pad
    if distance <= reach:
        return Contact(nx, ny, distance, reach)
    return None


def circle_touches_box(x: float, y: float, r: float, box: Box) -> bool:
    """Strict circle-rectangle overlap (the circle must reach inside its own radius)."""

    cx, cy = closest_point(x, y, box)
    return math.hypot(x - cx, y - cy) < r


def reflect(vx: float, vy: float, nx: float, ny: float) -> tuple[float, float]:
    """
    Reflect a velocity about a unit normal: v' = v - 2 (v . n) n.

    Returns:
        tuple[float, float]: The reflected velocity.
    """

    dot = vx * nx + vy * ny
    return vx - 2 * dot * nx, vy - 2 * dot * ny


def resolve_contact(body: Body, contact: Contact) -> None:
    """
    Bounce a body off a contact and nudge it clear of the rectangle.

    Side effects:
        - Reflects `body.dx`, `body.dy` about the contact normal.
        - Moves the body along the normal by the overlap plus `PUSH_EPSILON`.
    """

    body.dx, body.dy = reflect(body.dx, body.dy, contact.nx, contact.ny)

    push = contact.reach - contact.distance + PUSH_EPSILON
    body.x += contact.nx * push
    body.y += contact.ny * push


def bounce_off_walls(body: Body, width: float) -> bool:
    """
    Reflect a body off the left, right and top edges of the play field.

    Only the velocity component heading out of the field is turned round; a body already moving
    back in keeps its velocity and is just clamped inside.

    Args:
        body: The moving body.
        width: Play field width. The floor is deliberately open.

    Returns:
        bool: True if any wall was hit.
    """

    hit = False

    if body.x + body.r > width:
        # Ball hit right wall
        body.x = width - body.r
        body.dx = -abs(body.dx)
        hit = True
    elif body.x - body.r < 0:
        # Ball hit left wall
        body.x = body.r
        body.dx = abs(body.dx)
        hit = True

    if body.y - body.r < 0:
        # Ball hit top wall
        body.y = body.r
        body.dy = abs(body.dy)
        hit = True

    return hit


def paddle_deflection(ball_x: float, paddle_left: float, paddle_w: float, max_deflection: float) -> float:
    """
    Horizontal velocity after a paddle bounce, steered by where the ball landed.

    Args:
        ball_x: Ball centre X at contact.
        paddle_left: Paddle left edge.
        paddle_w: Paddle width.
        max_deflection: Horizontal speed given to a ball landing on the very edge.

    Returns:
        float: -max_deflection at the left edge, 0 at the centre, +max_deflection at the right edge.
    """

    hit_pos = (ball_x - (paddle_left + paddle_w / 2)) / (paddle_w / 2)
    return hit_pos * max_deflection


def ground_y(x: float, width: float, baseline: float) -> float:
    """Height of the runner's sloped ground at `x`: 20 pixels higher on the left edge than on the right."""

    return baseline - 20 + (20 * x) / width
