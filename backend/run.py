from quizrelay import create_app, socketio
from quizrelay.services.relay.scheduler import start_periodic_tasks

app = create_app()

if __name__ == '__main__':
    start_periodic_tasks(app)
    socketio.run(app, host='0.0.0.0', port=app.config['PORT'], debug=True, use_reloader=False)
