# instructions.py
# Fixed turn-instruction vocabulary, exposed as data.

from typing import List

from .models import TransportMode


ACTIONS = (
    "Continue",
    "Turn right",
    "Turn left",
    "Slight right",
    "Slight left",
    "Sharp right",
    "Sharp left",
)

DIRECTIONS = (
    "north", "northeast", "east", "southeast",
    "south", "southwest", "west", "northwest",
)

START_TEMPLATE = "Start {mode} route"
DESTINATION_INSTRUCTION = "You've reached your destination"
CONTINUE_INSTRUCTION = "Continue straight"

# Turn placed at 25 %, 50 % and 75 % of the point list, in that order.
# Each entry: (fraction of point count, template taking {direction}).
WAYPOINT_TURNS = (
    (0.25, ACTIONS[1] + " and continue {direction}"),
    (0.50, ACTIONS[2] + " onto the path and continue {direction}"),
    (0.75, ACTIONS[4] + " and continue {direction}"),
)


def start_instruction(mode: TransportMode) -> str:
    return START_TEMPLATE.format(mode=mode.value)


def all_instructions(mode: TransportMode) -> List[str]:
    """Every instruction string the synthesizer can place on a route."""
    turns = [
        template.format(direction=direction)
        for _, template in WAYPOINT_TURNS
        for direction in DIRECTIONS
    ]
    return [start_instruction(mode)] + turns + [DESTINATION_INSTRUCTION]
