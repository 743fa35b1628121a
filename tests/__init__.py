"""aggstore test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- contract/     : Behavior every storage adapter must share, run per backend.
- integration/  : Real databases, migrations, and triggers.
- e2e/          : The `aggstore` CLI driven through Click's CliRunner.
- functional/   : User-visible flows (onboarding, help) at the boundary.
- fixtures/     : Engines, containers, and record factories (loaded as plugins).
- helpers/      : Shared assertions (no tests here).

General guidance
- Keep unit fast and deterministic; prefer fakes at the adapter boundary.
- Contract tests parametrize backends; PostgreSQL is skipped without Docker.
- Property-based tests use @pytest.mark.property; threaded or container-backed
  tests use @pytest.mark.slow.
"""
