from fedforum import create_app, db
from fedforum.models import User, Group, Post, Activity, Server

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {'db': db, 'app': app, 'User': User, 'Group': Group, 'Post': Post, 'Activity': Activity,
            'Server': Server}
