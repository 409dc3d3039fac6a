"""Version 1 of the Meetup Planner API."""
