"""Infrastructure primitives: clock, interval timer, simulation hooks."""
