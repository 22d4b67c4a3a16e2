from autodebate.config.settings import settings
