"""Core engine: fetching, artifact resolution, matching, patching, emission."""
