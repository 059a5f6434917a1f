"""Labeler components.

- rules: validated YAML rule file
- event: pull request context from the webhook payload
- labels: label directory and provisioning
- classifier: trigger selection
- mutations: label ID resolution and remove/add calls
- runner: one run, end to end
"""
