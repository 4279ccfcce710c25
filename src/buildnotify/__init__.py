"""
BuildNotify — relays OpenShift build lifecycle events to Flowdock.

Watches build resources, filters their phase transitions per watcher,
and fans each accepted event out to one or more notifiers.
"""

__version__ = "0.1.0"
