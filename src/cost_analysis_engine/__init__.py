"""
Cost Analysis Engine - batch cost anomaly detection and optimization recommendations.

A library-level component for:
- Statistical anomaly detection over per-resource daily spend
- Rule-based rightsizing, idle-resource and reserved-capacity recommendations
- Status lifecycle tracking for anomalies and recommendations
- Organization-level savings rollups
"""

__version__ = "0.1.0"
