"""hookhub - GitHub webhook to Slack notification relay."""
__version__ = "0.1.0"
