# Domain services: settings, Meta sync, LLM analysis, analytics and reports
