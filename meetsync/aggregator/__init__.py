from meetsync.aggregator.worker import Classifier, MeetingAggregator, Panel, Phase

__all__ = ["Classifier", "MeetingAggregator", "Panel", "Phase"]
