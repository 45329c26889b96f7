"""Engine-agnostic building blocks: state store, scheduler and shared types."""
