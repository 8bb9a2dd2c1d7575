import click
from flask.cli import with_appcontext

from cyberscroll.extensions import db


@click.command('status')
@with_appcontext
def status():
    """
    [验证指令] 查看当前内存库中的数据统计。
    """
    from cyberscroll.seed import entity_counts

    click.echo(click.style('📊 CyberScroll 数据状态:', fg='cyan', bold=True))

    counts = entity_counts()
    click.echo(f" - 用户 (Users): \t{counts['users']}")
    click.echo(f" - 文章 (Articles): \t{counts['articles']}")
    click.echo(f" - 分类 (Categories): \t{counts['categories']}")
    click.echo(f" - 评论 (Comments): \t{counts['comments']}")
    click.echo(f" - 点赞 (Likes): \t{counts['likes']}")
    click.echo(f" - 留言 (Messages): \t{counts['messages']}")
    click.echo(f" - 文件 (Documents): \t{counts['documents']}")

    if counts['users'] > 0:
        click.echo(click.style('✔ 数据已加载。', fg='green'))
    else:
        click.echo(click.style('⚠ 数据为空，请运行 flask forge 生成数据。', fg='yellow'))


@click.command('forge')
@click.option('--scale', default=1, help='数据规模倍数 (每倍 10 篇文章)')
@with_appcontext
def forge(scale):
    """
    [造物主指令] 重建内存库：演示数据 + Faker 生成的文章与评论。
    警告：这将清除现有数据！
    """
    from cyberscroll.seed import seed_mock_data, forge_fake_data, entity_counts

    click.echo(click.style(f'⚡ 初始化 CyberScroll 数据 (规模: {scale}x)...', fg='cyan', bold=True))

    # 1. 清除旧数据
    db.drop_all()
    db.create_all()

    # 2. 基础演示数据
    click.echo('正在写入管理员、分类与示例文章...')
    seed_mock_data()

    # 3. 随机文章
    click.echo('正在生成随机文章与评论...')
    created = forge_fake_data(scale)
    click.echo(f'  ✓ 已生成 {created} 篇文章')

    click.echo(click.style('✔ CyberScroll 数据构建完成！', fg='green', bold=True))
    click.echo("管理员账号: francis@cyberscroll.com / 密码: password")
    click.echo(f"数据统计: {entity_counts()}")
