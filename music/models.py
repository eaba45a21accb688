from django.db import models


class MusicType(models.TextChoices):
    ROCK = "ROCK", "Rock"
    JAZZ = "JAZZ", "Jazz"
    BLUES = "BLUES", "Blues"
    POP = "POP", "Pop"
    BOSSA_NOVA = "BOSSA_NOVA", "Bossa Nova"
    CLASSICAL = "CLASSICAL", "Classical"
