"""
Felklasser för ruttritaren
"""


class InvalidInputError(ValueError):
    """Lokalt invariantbrott, t.ex. noll punkter eller okänd profil"""
