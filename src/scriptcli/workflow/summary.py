"""Post-install summary."""

from rich.console import Console
from rich.markdown import Markdown

from scriptcli.models.application import Application, LoginCredentials, OpaqueCredentials
from scriptcli.models.launch import LaunchSettings
from scriptcli.utils.templates import render_template


SUMMARY_TEMPLATE = """# Instance Details

- Instance Name: {{ launch.name }}
- Application: {{ app.name }}
- Image: {{ launch.image }}
- Incus Profiles: {{ launch.profiles | join(" ") }}
{% if login and login.username %}- Default Credentials: User: {{ login.username }} / Password: {{ login.password or "" }}
{% elif opaque %}- Default Credentials: {{ opaque.value }}
{% endif %}
## Application Information
{{ app.description }}
{% if app.notes %}
## Notes
{% for note in app.notes %}- {{ note.text }}
{% endfor %}{% endif %}
## Resources
{% if app.website %}Website: [{{ app.name }}]({{ app.website }})
{% endif %}
{% if app.documentation %}Documentation: [{{ app.name }}]({{ app.documentation }})
{% endif %}
{% if app.interface_port %}Application Port: {{ app.interface_port }}
{% endif %}"""


def render_summary(application: Application, settings: LaunchSettings) -> str:
    """Render the Markdown summary for a provisioned instance."""
    credentials = application.default_credentials
    return render_template(
        SUMMARY_TEMPLATE,
        app=application,
        launch=settings,
        login=credentials if isinstance(credentials, LoginCredentials) else None,
        opaque=credentials if isinstance(credentials, OpaqueCredentials) else None,
    )


def print_summary(console: Console, application: Application, settings: LaunchSettings):
    """Print the summary as rendered Markdown."""
    console.print(Markdown(render_summary(application, settings)))
