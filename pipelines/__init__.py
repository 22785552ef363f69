"""
Pipelines — Kubeflow Pipelines (KFP v2) wrapping of the docs ingestion stages.

The fetch and chunk steps are ``@kfp.dsl.component`` functions exchanging
JSON-Lines Dataset artifacts, so each runs in its own container.
"""
