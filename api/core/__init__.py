"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature uses (DB wiring, settings,
logging, CRUD route generation). Feature-specific SQL stays in the feature
package (e.g. `leaderboards/`).
"""
