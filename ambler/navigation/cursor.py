from __future__ import annotations

from ambler.navigation.route import Route, RouteError
from ambler.types import WorldTilePos


class CursorExhaustedError(RouteError):
    """Raised when a waypoint is requested from an empty route."""


class RouteCursor:
    """Replays a Route's waypoints forever.

    Loop mode wraps: 0, 1, ..., N-1, 0, 1, ...
    Ping-pong mode bounces without repeating an endpoint:
    0, 1, ..., N-1, N-2, ..., 1, 0, 1, ...
    """

    def __init__(self, route: Route = Route.EMPTY) -> None:
        self._route = route
        self.current_index = 0
        self.moving_forward = True

    @property
    def route(self) -> Route:
        return self._route

    def __len__(self) -> int:
        return len(self._route)

    def is_valid(self) -> bool:
        return self._route.is_valid

    def reset(self) -> None:
        """Rewind to the first waypoint. The route itself is untouched."""
        self.current_index = 0
        self.moving_forward = True

    def replace(self, route: Route) -> None:
        """Swap in a rebuilt route and rewind."""
        self._route = route
        self.reset()

    def peek(self) -> WorldTilePos:
        """The waypoint next_waypoint() would return, without advancing."""
        if not self._route.is_valid:
            raise CursorExhaustedError("Route has no waypoints")
        return self._route.waypoints[self.current_index]

    def next_waypoint(self) -> WorldTilePos:
        """Return the current waypoint and advance.

        Raises:
            CursorExhaustedError: If the route is empty.
        """
        waypoint = self.peek()
        count = len(self._route)

        if self._route.is_closed:
            self.current_index = (self.current_index + 1) % count
        elif self.moving_forward:
            self.current_index += 1
            if self.current_index >= count:
                # Turn around at N-2 so the endpoint isn't emitted twice.
                self.current_index = max(count - 2, 0)
                self.moving_forward = False
        else:
            self.current_index -= 1
            if self.current_index < 0:
                self.current_index = 1 if count > 1 else 0
                self.moving_forward = True

        return waypoint
