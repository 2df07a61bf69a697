from sitesettings.services import get_logo_url


def site_logo(request):
    return {"logo_url": get_logo_url()}
