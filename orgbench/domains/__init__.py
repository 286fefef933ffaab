"""Engine components, one package per analytic domain."""
