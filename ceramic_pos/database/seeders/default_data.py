def seed(conn):
    # one settings row; margins start disabled until configured
    conn.execute("INSERT OR IGNORE INTO app_settings(id) VALUES (1)")
