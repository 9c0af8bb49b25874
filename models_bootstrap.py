# models_bootstrap.py
from organization import models as _org_models
from location import models as _location_models
from asset import models as _asset_models
