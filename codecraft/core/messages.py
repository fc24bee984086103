"""User-facing messages surfaced through the world state."""

NO_BLOCKS = "No blocks have been placed yet. Try dragging a block into the workspace!"
BUMPED = "Oops! Bumped into a wall."
REFUELED = "Refueled!"
NOTHING_TO_COLLECT = "Nothing to collect here."
GOAL_REACHED = "Hooray! Level complete, great job!"
MISSING_FUEL = "You reached the star, but forgot to refuel!"
NOT_REACHED = "Not at the star yet. Keep trying!"
COURSE_COMPLETE = "Congratulations! You finished the beginner block coding course!"
