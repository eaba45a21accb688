"""Django AppConfig for the music app.

Holds the music vocabulary shared by the pages (currently the `MusicType`
categories shown on the home page). The app defines no tables.
"""

from django.apps import AppConfig


class MusicConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "music"
