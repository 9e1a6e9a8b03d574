"""Register the shared fixtures in `tests.fixtures` for every test (including `doctest`s under `src/`)."""

pytest_plugins = ['tests.fixtures']
