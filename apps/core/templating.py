from fastapi.templating import Jinja2Templates
from config import BASE_DIR, settings
from apps.core.toast import pop_toasts

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.globals["pop_toasts"] = pop_toasts
templates.env.globals["project_name"] = settings.PROJECT_NAME
