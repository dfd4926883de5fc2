"""
Formatter orchestration pipeline.

Resolves an ordered chain of formatters for a document language, runs the
chain against a shared document one formatter at a time, detects conflicts
with the host's own format-on-save setup, and guards against re-entrant
runs. Import the submodules directly, e.g.
``from multiformatter.formatters.executor import PipelineExecutor``.
"""
