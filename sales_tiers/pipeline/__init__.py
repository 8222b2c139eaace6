"""
Pipeline stages: config-driven wrappers that log an audit record per run.

Modules
-------
base     : PipelineStage ABC + StageOutcome.
classify : ClassifyStage — workbook -> ClassificationResult (+ reports).
"""
