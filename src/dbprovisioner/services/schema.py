"""Multi-tenant schema, service account and sample data provisioning."""

from typing import Tuple

from dbprovisioner.models import AuthOutcome, DatabaseConfig
from dbprovisioner.services.sql_executor import SqlExecutor

TENANT_TABLES: Tuple[str, ...] = (
    "admin_users",
    "contact_messages",
    "appointments",
    "site_settings",
    "blogs",
    "projects",
    "transactions",
)

CREATE_DATABASE_SQL = """
CREATE DATABASE IF NOT EXISTS {database}
  CHARACTER SET utf8mb4
  COLLATE utf8mb4_unicode_ci;
USE {database};
"""

# Every table is keyed by site_key; unique constraints include it so that
# tenants can reuse the same slug, username or setting key.
CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS admin_users (
  id INT AUTO_INCREMENT PRIMARY KEY,
  site_key VARCHAR(50) NOT NULL,
  username VARCHAR(50) NOT NULL,
  password_hash VARCHAR(255) NOT NULL,
  email VARCHAR(100),
  role ENUM('admin', 'editor', 'viewer') DEFAULT 'admin',
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  last_login TIMESTAMP NULL,
  is_active BOOLEAN DEFAULT true,
  INDEX idx_site_key (site_key),
  UNIQUE KEY unique_user_site (username, site_key)
) ENGINE=InnoDB;

CREATE TABLE IF NOT EXISTS contact_messages (
  id INT AUTO_INCREMENT PRIMARY KEY,
  site_key VARCHAR(50) NOT NULL,
  name VARCHAR(100) NOT NULL,
  email VARCHAR(100) NOT NULL,
  phone VARCHAR(20),
  subject VARCHAR(200),
  message TEXT NOT NULL,
  status ENUM('new', 'read', 'replied', 'archived') DEFAULT 'new',
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  replied_at TIMESTAMP NULL,
  notes TEXT,
  INDEX idx_site_key (site_key),
  INDEX idx_status (status),
  INDEX idx_created_at (created_at)
) ENGINE=InnoDB;

CREATE TABLE IF NOT EXISTS appointments (
  id INT AUTO_INCREMENT PRIMARY KEY,
  site_key VARCHAR(50) NOT NULL,
  name VARCHAR(100) NOT NULL,
  phone VARCHAR(20),
  email VARCHAR(100),
  service VARCHAR(100),
  preferred_date DATE,
  preferred_time TIME,
  message TEXT,
  status ENUM('pending', 'confirmed', 'completed', 'cancelled') DEFAULT 'pending',
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
  notes TEXT,
  INDEX idx_site_key (site_key),
  INDEX idx_status (status),
  INDEX idx_preferred_date (preferred_date),
  INDEX idx_created_at (created_at)
) ENGINE=InnoDB;

CREATE TABLE IF NOT EXISTS site_settings (
  id INT AUTO_INCREMENT PRIMARY KEY,
  site_key VARCHAR(50) NOT NULL,
  setting_key VARCHAR(100) NOT NULL,
  setting_value TEXT,
  setting_type ENUM('string', 'number', 'boolean', 'json') DEFAULT 'string',
  description TEXT,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
  INDEX idx_site_key (site_key),
  INDEX idx_setting_key (setting_key),
  UNIQUE KEY unique_setting_site (site_key, setting_key)
) ENGINE=InnoDB;

CREATE TABLE IF NOT EXISTS blogs (
  id INT AUTO_INCREMENT PRIMARY KEY,
  site_key VARCHAR(50) NOT NULL,
  title VARCHAR(200) NOT NULL,
  slug VARCHAR(200) NOT NULL,
  content TEXT NOT NULL,
  excerpt TEXT,
  featured_image VARCHAR(500),
  author_id INT,
  status ENUM('draft', 'published', 'archived') DEFAULT 'draft',
  published_at TIMESTAMP NULL,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
  meta_description TEXT,
  meta_keywords TEXT,
  INDEX idx_site_key (site_key),
  INDEX idx_status (status),
  INDEX idx_published_at (published_at),
  UNIQUE KEY unique_slug_site (site_key, slug),
  FOREIGN KEY (author_id) REFERENCES admin_users(id) ON DELETE SET NULL
) ENGINE=InnoDB;

CREATE TABLE IF NOT EXISTS projects (
  id INT AUTO_INCREMENT PRIMARY KEY,
  site_key VARCHAR(50) NOT NULL,
  title VARCHAR(200) NOT NULL,
  slug VARCHAR(200) NOT NULL,
  description TEXT,
  long_description TEXT,
  featured_image VARCHAR(500),
  gallery JSON,
  technologies JSON,
  project_url VARCHAR(500),
  github_url VARCHAR(500),
  status ENUM('concept', 'development', 'completed', 'maintenance') DEFAULT 'development',
  start_date DATE,
  end_date DATE,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
  sort_order INT DEFAULT 0,
  is_featured BOOLEAN DEFAULT false,
  INDEX idx_site_key (site_key),
  INDEX idx_status (status),
  INDEX idx_is_featured (is_featured),
  INDEX idx_sort_order (sort_order),
  UNIQUE KEY unique_slug_site (site_key, slug)
) ENGINE=InnoDB;

CREATE TABLE IF NOT EXISTS transactions (
  id INT AUTO_INCREMENT PRIMARY KEY,
  site_key VARCHAR(50) NOT NULL,
  transaction_id VARCHAR(100) NOT NULL,
  customer_name VARCHAR(100),
  customer_email VARCHAR(100),
  amount DECIMAL(10,2) NOT NULL,
  currency VARCHAR(3) DEFAULT 'USD',
  status ENUM('pending', 'completed', 'failed', 'refunded') DEFAULT 'pending',
  payment_method VARCHAR(50),
  payment_processor VARCHAR(50),
  processor_transaction_id VARCHAR(100),
  description TEXT,
  metadata JSON,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
  INDEX idx_site_key (site_key),
  INDEX idx_status (status),
  INDEX idx_created_at (created_at),
  UNIQUE KEY unique_transaction_site (site_key, transaction_id)
) ENGINE=InnoDB;
"""

CREATE_USER_SQL = """
CREATE USER IF NOT EXISTS '{user}'@'localhost' IDENTIFIED BY '{password}';
GRANT ALL PRIVILEGES ON {database}.* TO '{user}'@'localhost';
FLUSH PRIVILEGES;
"""

# contact_messages and appointments have no unique key, so their rows are
# guarded with NOT EXISTS instead of INSERT IGNORE.
SAMPLE_DATA_SQL = """
INSERT IGNORE INTO admin_users (site_key, username, password_hash, email) VALUES
  ('demo', 'admin', '!reset-required', 'admin@demo.example.com'),
  ('portfolio', 'admin', '!reset-required', 'admin@portfolio.example.com');

INSERT IGNORE INTO site_settings (site_key, setting_key, setting_value, setting_type) VALUES
  ('demo', 'site_title', 'Demo Site', 'string'),
  ('demo', 'contact_email', 'hello@demo.example.com', 'string'),
  ('portfolio', 'site_title', 'Portfolio Site', 'string'),
  ('portfolio', 'contact_email', 'contact@portfolio.example.com', 'string');

INSERT IGNORE INTO blogs (site_key, title, slug, content, status, published_at) VALUES
  ('demo', 'Welcome', 'welcome', 'Welcome to our demo site!', 'published', NOW()),
  ('portfolio', 'My First Project', 'my-first-project', 'This is my first project...',
   'published', NOW());

INSERT IGNORE INTO projects (site_key, title, slug, description, status, is_featured) VALUES
  ('portfolio', 'Web Framework', 'web-framework', 'A multi-tenant web framework',
   'development', true),
  ('portfolio', 'MariaDB Setup Tool', 'mariadb-setup', 'Universal database setup utility',
   'completed', false);

INSERT INTO contact_messages (site_key, name, email, phone, message)
SELECT 'demo', 'John Doe', 'john@example.com', '555-1234',
       'Interested in web development services for my business.'
FROM DUAL WHERE NOT EXISTS (
  SELECT 1 FROM contact_messages WHERE site_key = 'demo' AND email = 'john@example.com'
);

INSERT INTO contact_messages (site_key, name, email, phone, message)
SELECT 'portfolio', 'Jane Smith', 'jane@example.com', '555-5678',
       'Looking for technical consulting for our startup.'
FROM DUAL WHERE NOT EXISTS (
  SELECT 1 FROM contact_messages WHERE site_key = 'portfolio' AND email = 'jane@example.com'
);

INSERT INTO appointments (site_key, name, phone, email, service, message)
SELECT 'demo', 'Mike Johnson', '555-9999', 'mike@example.com', 'Website Redesign',
       'Need to modernize our company website.'
FROM DUAL WHERE NOT EXISTS (
  SELECT 1 FROM appointments WHERE site_key = 'demo' AND email = 'mike@example.com'
);

INSERT INTO appointments (site_key, name, phone, email, service, message)
SELECT 'portfolio', 'Sarah Wilson', '555-0000', 'sarah@example.com', 'IT Consultation',
       'Startup needs technology infrastructure guidance.'
FROM DUAL WHERE NOT EXISTS (
  SELECT 1 FROM appointments WHERE site_key = 'portfolio' AND email = 'sarah@example.com'
);
"""


def escape_sql_string(value: str) -> str:
    """Escapes a value for use inside a single-quoted MariaDB string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class SchemaProvisioner:
    """Issues the idempotent DDL, grants and seed data for one database."""

    def __init__(self, logger, console, executor: SqlExecutor):
        self.logger = logger
        self.console = console
        self.executor = executor

    def create_database_sql(self, config: DatabaseConfig) -> str:
        return CREATE_DATABASE_SQL.format(database=config.name) + CREATE_TABLES_SQL

    def create_user_sql(self, config: DatabaseConfig) -> str:
        return CREATE_USER_SQL.format(
            user=config.user,
            password=escape_sql_string(config.password),
            database=config.name,
        )

    def create_database(self, config: DatabaseConfig, auth: AuthOutcome) -> bool:
        self.console.rule("Creating Database and Tables")
        self.console.print(f"[blue]Creating database: {config.name}[/blue]")
        self.logger.info(
            "Creating database %s with tables: %s", config.name, ", ".join(TENANT_TABLES)
        )

        if not self.executor.execute(self.create_database_sql(config), config, False, auth):
            return False

        self.console.print("[green]Database and tables created successfully[/green]")
        return True

    def create_user(self, config: DatabaseConfig, auth: AuthOutcome) -> bool:
        self.console.rule("Creating Database User")
        self.console.print(f"[blue]Creating database user: {config.user}[/blue]")

        sql = self.create_user_sql(config)
        secrets = [config.password, escape_sql_string(config.password)]
        if not self.executor.execute(sql, config, False, auth, redact=secrets):
            return False

        self.console.print(
            f"[green]Database user '{config.user}' created with full privileges[/green]"
        )
        self.logger.info("Database user %s granted privileges on %s", config.user, config.name)
        return True

    def seed(self, config: DatabaseConfig, auth: AuthOutcome) -> bool:
        self.console.rule("Creating Sample Data")

        if not self.executor.execute(SAMPLE_DATA_SQL, config, True, auth):
            return False

        self.console.print("[green]Sample data created successfully[/green]")
        self.logger.info("Sample data inserted into %s", config.name)
        return True
