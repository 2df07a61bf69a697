REGIONS = [
    "Auvergne-Rhône-Alpes",
    "Bourgogne-Franche-Comté",
    "Bretagne",
    "Centre-Val de Loire",
    "Corse",
    "Grand Est",
    "Hauts-de-France",
    "Île-de-France",
    "Normandie",
    "Nouvelle-Aquitaine",
    "Occitanie",
    "Pays de la Loire",
    "Provence-Alpes-Côte d'Azur",
    "Guadeloupe",
    "Guyane",
    "Martinique",
    "La Réunion",
    "Mayotte",
]

PRODUCT_CATEGORIES = [
    "Fruits et Légumes",
    "Viandes et Charcuteries",
    "Produits Laitiers",
    "Boulangerie et Pâtisserie",
    "Boissons",
    "Épicerie Fine",
    "Poissons et Fruits de Mer",
    "Miel et Produits de la Ruche",
]

REGION_CHOICES = [(region, region) for region in REGIONS]
CATEGORY_CHOICES = [(category, category) for category in PRODUCT_CATEGORIES]
