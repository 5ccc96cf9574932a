"""Pure condition-graph kernel: models, transitions, hydration and emission."""
