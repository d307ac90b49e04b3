"""Example shop application used to demonstrate modex."""
