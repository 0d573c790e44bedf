"""
Flask CLI commands.

Commands:
- flask init-db: Create the schema and the bootstrap admin
- flask create-user: Create or update a user
- flask export-invoice: Write an invoice PDF to INVOICE_PDF_DIR
"""

import click
from flask import current_app
from pos.database import get_session, get_engine, initialize
from pos.exceptions import PosError
from pos.models import UserRole


def init_cli_commands(app):
    """Register CLI commands with Flask app."""
    
    @app.cli.command('init-db')
    def init_db_command():
        """Create missing tables/columns and the bootstrap admin."""
        from pos.services.user_service import ensure_admin_account
        
        initialize(get_engine())
        admin = ensure_admin_account(
            get_session(),
            current_app.config.get('DEFAULT_ADMIN_USERNAME', 'admin'),
            current_app.config.get('DEFAULT_ADMIN_PASSWORD', 'admin123'),
        )
        click.echo(click.style('Database ready.', fg='green'))
        click.echo(f'   Admin: {admin.username}')
    
    @app.cli.command('create-user')
    @click.option('--username', prompt=True, help='Login name (stored lower-case)')
    @click.option('--display-name', default='', help='Name shown on reports')
    @click.option('--role', type=click.Choice([r.value for r in UserRole], case_sensitive=False),
                  default=UserRole.CASHIER.value, show_default=True)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
    def create_user(username, display_name, role, password):
        """Create or update a user."""
        from pos.services.user_service import save_user
        
        try:
            user = save_user(get_session(), username, display_name, role, password)
        except PosError as e:
            raise click.ClickException(e.message)
        
        click.echo(click.style('User saved.', fg='green', bold=True))
        click.echo(f'   Username: {user.username}')
        click.echo(f'   Role: {user.role}')
    
    @app.cli.command('export-invoice')
    @click.argument('sale_id', type=int)
    def export_invoice(sale_id):
        """Render the invoice PDF for a sale into INVOICE_PDF_DIR."""
        from pos.services.invoice_service import build_invoice_data
        from pos.services.invoice_pdf_service import write_invoice_pdf
        from pos.blueprints.invoices import business_info
        
        try:
            invoice = build_invoice_data(get_session(), sale_id)
        except PosError as e:
            raise click.ClickException(e.message)
        
        path = write_invoice_pdf(invoice, current_app.config['INVOICE_PDF_DIR'], business_info())
        click.echo(path)
