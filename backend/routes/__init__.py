"""
Routes package for the Job Documents API.
Each module exposes one Flask blueprint; app.create_app registers them.
"""

# (module, blueprint variable, url prefix)
BLUEPRINTS = [
    ('routes.documents', 'documents_bp', '/api/documents'),
    ('routes.jobs', 'jobs_bp', '/api/jobs'),
    ('routes.settings', 'settings_bp', '/api/settings'),
    ('routes.health', 'health_bp', '/api'),
]
