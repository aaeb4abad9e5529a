"""trendme - resumable AI content pipelines for virtual influencers."""

__version__ = "0.1.0"
