# cli.py
import logging

import click

from cos_uploads.config.settings import get_settings

logger = logging.getLogger(__name__)


def mask_secret(value: str) -> str:
    if not value:
        return "<not set>"
    # fixed-width mask for short values
    if len(value) <= 8:
        return "*" * 8
    return f"{value[:4]}{'*' * (len(value) - 4)}"


@click.group()
def cli():
    """CLI commands for the COS uploads service"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  App Name: {settings.app_name}")
    click.echo(f"  COS Endpoint: {settings.cos_endpoint or '<not set>'}")
    click.echo(f"  COS Bucket: {settings.cos_bucket_name or '<not set>'}")
    click.echo(f"  COS Region: {settings.cos_region or '<not set>'}")
    click.echo(f"  Access Key Id: {mask_secret(settings.cos_access_key_id)}")
    click.echo(f"  Secret Access Key: {mask_secret(settings.cos_secret_access_key)}")
    click.echo(f"  IAM API Key Id: {mask_secret(settings.cos_api_key_id)}")
    click.echo(f"  Service Instance Id: {settings.cos_service_instance_id or '<not set>'}")
    click.echo(f"  Signature Version: {settings.cos_signature_version or '<default>'}")
    click.echo(f"  Max Upload Count: {settings.max_upload_count or 'unlimited'}")
    click.echo(f"  Log Level: {settings.log_level}")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", default=5000, type=int, help="Port to listen on")
def serve(host, port):
    """Run the upload API with uvicorn"""
    import uvicorn

    from cos_uploads.main import create_app

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level_number,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Server starting on port: {port}")
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    cli()
