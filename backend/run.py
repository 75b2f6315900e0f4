from catalog import create_app, db

app = create_app()

if __name__ == '__main__':
    try:
        app.run(port=app.config['PORT'], threaded=True)
    finally:
        # Drain list-query workers and close pooled connections
        with app.app_context():
            app.extensions['catalog'].close(db.engine)
